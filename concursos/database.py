"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for candidate and contest storage.
"""

from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


class Candidate(Base):
    """Registered job candidate."""

    __tablename__ = "candidates"
    __unique_key__ = "cpf"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    cpf = Column(String, nullable=False, unique=True, index=True)
    professions = Column(JSON, nullable=False, default=list)  # ordered, no duplicates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cpf": self.cpf,
            "professions": list(self.professions or []),
        }

    def __repr__(self) -> str:
        return f"<Candidate id={self.id} cpf={self.cpf!r}>"


class Contest(Base):
    """Public-sector contest (concurso) with its open positions."""

    __tablename__ = "contests"
    __unique_key__ = "code"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agency = Column(String, nullable=False)
    edital = Column(String, nullable=False)
    code = Column(String, nullable=False, unique=True, index=True)

    positions = relationship(
        "Position",
        back_populates="contest",
        order_by="Position.ordinal",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agency": self.agency,
            "edital": self.edital,
            "code": self.code,
            "positions": [p.to_dict() for p in self.positions],
        }

    def __repr__(self) -> str:
        return f"<Contest id={self.id} code={self.code!r}>"


class Position(Base):
    """One open position of a contest: a required profession and its vacancies."""

    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contest_id = Column(Integer, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)
    ordinal = Column(Integer, nullable=False, default=0)
    profession = Column(String, nullable=False)
    vacancies = Column(Integer, nullable=False, default=1)

    contest = relationship("Contest", back_populates="positions")

    def to_dict(self) -> Dict[str, Any]:
        return {"profession": self.profession, "vacancies": self.vacancies}


def build_candidate(data: Dict[str, Any]) -> Candidate:
    """Create an unsaved Candidate from an already validated payload."""
    return Candidate(
        name=data["name"].strip(),
        cpf=data["cpf"].strip(),
        professions=_ordered_unique(data["professions"]),
    )


def build_contest(data: Dict[str, Any]) -> Contest:
    """Create an unsaved Contest (with positions) from an already validated payload."""
    contest = Contest(
        agency=data["agency"].strip(),
        edital=data["edital"].strip(),
        code=data["code"].strip(),
    )
    for ordinal, position in enumerate(data["positions"]):
        contest.positions.append(
            Position(
                ordinal=ordinal,
                profession=position["profession"].strip(),
                vacancies=position.get("vacancies", 1),
            )
        )
    return contest


def _ordered_unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        value = value.strip()
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def get_engine(db_path: Path) -> Engine:
    """
    Create the SQLAlchemy engine for a SQLite file.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy engine
    """
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = get_engine(db_path)
    Session = sessionmaker(bind=engine)
    return Session()
