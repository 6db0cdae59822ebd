from sqlalchemy.orm import Session

from pharmacy.models.medicine import Medicine
from pharmacy.models.user import User, UserRole


def normalize_clinic(label: str | None) -> str:
    """'Clinic1 (Alice, Bob)' -> 'Clinic1'."""
    if not label:
        return ""
    return label.split(" (")[0].strip()


def list_clinics(db: Session) -> list[str]:
    """All known clinics, labelled with their workers, e.g. 'Clinic1 (Alice, Bob)'."""
    medicine_clinics = [c for (c,) in db.query(Medicine.clinic).distinct().order_by(Medicine.clinic).all()]
    workers = (
        db.query(User.clinic, User.name)
        .filter(User.role == UserRole.WORKER.value, User.clinic.isnot(None), User.active == True)  # noqa: E712
        .order_by(User.name)
        .all()
    )

    clinic_workers: dict[str, list[str]] = {}
    for clinic, name in workers:
        clinic_workers.setdefault(clinic, []).append(name)

    clinics = dict.fromkeys(c for c in [*medicine_clinics, *(c for c, _ in workers)] if c)
    return [
        f"{clinic} ({', '.join(clinic_workers[clinic])})" if clinic in clinic_workers else clinic
        for clinic in clinics
    ]
