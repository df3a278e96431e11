from sqlalchemy import event
from sqlalchemy.orm import declarative_base

from core.id_generator import TYPE_POSTFIX, generate_random_id

# Общий Base для всех моделей
Base = declarative_base()


@event.listens_for(Base, "before_insert", propagate=True)
def assign_random_id(mapper, connection, target):
    entity = target.__tablename__
    if getattr(target, "id", None) is None and entity in TYPE_POSTFIX:
        target.id = generate_random_id(entity)
