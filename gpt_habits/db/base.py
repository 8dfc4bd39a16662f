# gpt_habits/db/base.py
from gpt_habits.db.base_class import Base  # noqa: F401

# Importa todos los modelos que definen tablas para que alembic los vea
from gpt_habits.models import survey_response  # noqa: F401
from gpt_habits.models import live  # noqa: F401
from gpt_habits.models import audit  # noqa: F401
