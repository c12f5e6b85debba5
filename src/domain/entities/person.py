"""
Person Entity

Sample business record managed through transaction codes.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class Person(SQLModel, table=True):
    __tablename__ = "persons"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=100)
    last_name: str = Field(max_length=100)
