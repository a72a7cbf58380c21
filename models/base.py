import uuid

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_uuid() -> str:
    """Primary keys are UUID strings, the same shape the hosted tables hand out."""
    return str(uuid.uuid4())
