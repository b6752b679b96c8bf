"""Persisted import preference (the last used sheet link)."""

from sqlalchemy.orm import Session

from proflow.db.models import Preference

IMPORT_SOURCE_KEY = "proflow_sheet_url"


class PreferenceService:
    """Reads and writes the remembered import link.

    Attributes:
        db: Database session.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_saved_source(self) -> str | None:
        """Return the remembered import link, if any."""
        pref = self.db.get(Preference, IMPORT_SOURCE_KEY)
        return pref.value if pref else None

    def save_source(self, url: str) -> None:
        """Remember an import link for later sessions."""
        pref = self.db.get(Preference, IMPORT_SOURCE_KEY)
        if pref is None:
            self.db.add(Preference(key=IMPORT_SOURCE_KEY, value=url))
        else:
            pref.value = url
        self.db.commit()

    def clear_saved_source(self) -> None:
        """Forget the remembered import link."""
        pref = self.db.get(Preference, IMPORT_SOURCE_KEY)
        if pref is not None:
            self.db.delete(pref)
            self.db.commit()
