from typing import Any, Dict, List

REQUIRED_CANDIDATE_FIELDS = ["name", "cpf"]
REQUIRED_CONTEST_FIELDS = ["agency", "edital", "code"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _check_required(data: Dict[str, Any], fields: List[str], errors: List[str]) -> None:
    for f in fields:
        if f not in data or data[f] is None:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Candidate must be an object"]

    _check_required(data, REQUIRED_CANDIDATE_FIELDS, errors)

    professions = data.get("professions")
    if professions is None:
        errors.append("Missing required field: professions")
    elif not isinstance(professions, (list, tuple)):
        errors.append("Field 'professions' must be a list of strings")
    elif not professions:
        errors.append("Field 'professions' must contain at least one profession")
    else:
        for i, p in enumerate(professions):
            if not _is_non_empty_str(p):
                errors.append(f"Profession #{i + 1} must be a non-empty string")

    return errors


def validate_contest(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Positions default to one vacancy when the count is omitted.
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Contest must be an object"]

    _check_required(data, REQUIRED_CONTEST_FIELDS, errors)

    positions = data.get("positions")
    if positions is None:
        errors.append("Missing required field: positions")
        return errors
    if not isinstance(positions, (list, tuple)):
        errors.append("Field 'positions' must be a list")
        return errors
    if not positions:
        errors.append("Field 'positions' must contain at least one position")

    for i, position in enumerate(positions, 1):
        if not isinstance(position, dict):
            errors.append(f"Position #{i} must be an object")
            continue
        if not _is_non_empty_str(position.get("profession")):
            errors.append(f"Position #{i}: 'profession' must be a non-empty string")
        vacancies = position.get("vacancies", 1)
        # bool is an int subclass
        if isinstance(vacancies, bool) or not isinstance(vacancies, int):
            errors.append(f"Position #{i}: 'vacancies' must be an integer")
        elif vacancies < 1:
            errors.append(f"Position #{i}: 'vacancies' must be at least 1")

    return errors
