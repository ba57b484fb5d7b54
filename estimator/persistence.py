"""
Persistence adapter — saves and loads the estimate snapshot.

The snapshot is the configuration a customer would expect to find again:
customer, building, accessories, door positions, colors, concrete and
contract. Wizard position and pricing are never stored; pricing is always
recomputed after a load.
"""

import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from . import models
from .exceptions import PersistenceError
from .schemas import EstimateSnapshot

logger = logging.getLogger(__name__)


class EstimateRepository:
    """Stores one snapshot per storage key in the saved_estimates table."""

    def __init__(self, session_factory, storage_key: str):
        self.session_factory = session_factory
        self.storage_key = storage_key

    def save(self, snapshot: EstimateSnapshot):
        """Insert or replace the snapshot. Raises PersistenceError on failure."""
        payload = snapshot.model_dump(mode="json")
        db = self.session_factory()
        try:
            row = db.query(models.SavedEstimate).filter(
                models.SavedEstimate.storage_key == self.storage_key
            ).first()
            if row:
                row.snapshot_json = payload
            else:
                db.add(models.SavedEstimate(storage_key=self.storage_key, snapshot_json=payload))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not save estimate {self.storage_key!r}: {e}") from e
        finally:
            db.close()
        logger.info(f"Saved estimate {self.storage_key!r}")

    def load(self):
        """
        Returns the stored EstimateSnapshot, or None if nothing was saved.
        Raises PersistenceError if the database or the stored payload is unreadable.
        """
        db = self.session_factory()
        try:
            row = db.query(models.SavedEstimate).filter(
                models.SavedEstimate.storage_key == self.storage_key
            ).first()
            payload = row.snapshot_json if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load estimate {self.storage_key!r}: {e}") from e
        finally:
            db.close()

        if payload is None:
            return None
        try:
            return EstimateSnapshot.model_validate(payload)
        except ValidationError as e:
            raise PersistenceError(
                f"Stored estimate {self.storage_key!r} is not a valid snapshot: {e}"
            ) from e

    def delete(self):
        """Forget the stored snapshot. No-op if none exists."""
        db = self.session_factory()
        try:
            db.query(models.SavedEstimate).filter(
                models.SavedEstimate.storage_key == self.storage_key
            ).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not delete estimate {self.storage_key!r}: {e}") from e
        finally:
            db.close()
