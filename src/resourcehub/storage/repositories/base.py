from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, List, Dict, Any
from sqlalchemy.orm import Session

T = TypeVar("T")

class BaseRepository(Generic[T], ABC):
    """Abstract base repository defining CRUD contracts using SQLAlchemy Session."""

    @abstractmethod
    def create(self, session: Session, entity: Any) -> T:
        pass

    @abstractmethod
    def get(self, session: Session, id: str) -> Optional[T]:
        pass

    @abstractmethod
    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[T]:
        pass

    @abstractmethod
    def delete(self, session: Session, id: str) -> bool:
        pass

    @abstractmethod
    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[T]:
        pass

    @staticmethod
    def apply_updates(entity: Any, updates: Dict[str, Any], allowed: tuple) -> None:
        """Copy whitelisted keys from `updates` onto `entity`."""
        for key in allowed:
            if key in updates:
                setattr(entity, key, updates[key])
