"""
Person business object

CRUD over the persons table, reachable through transaction codes.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.app.errors import Errors
from src.app.handlers.base import BusinessHandler, HandlerContext, HandlerResponse
from src.app.handlers.params import parse_params
from src.core.result import Result, Return
from src.domain.entities import BusinessObject, Person

logger = logging.getLogger(__name__)


class PersonIdParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(gt=0)


class PersonNameParams(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)


class CreatePersonParams(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class UpdatePersonParams(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: int = Field(gt=0)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def has_changes(self):
        if self.name is None and self.last_name is None:
            raise ValueError("name or last_name is required")
        return self


def _person_data(person: Person) -> dict:
    return {"id": person.id, "name": person.name, "last_name": person.last_name}


class PersonHandler(BusinessHandler):
    object_name = BusinessObject.person

    async def get_person(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(PersonIdParams, params, scalar_field="id")
        if parsed.is_err():
            return Return.err(parsed.error)

        async with ctx.uow:
            person = await ctx.uow.persons.get_by_id(parsed.value.id)
            if person is None:
                return Return.err(Errors.not_found("Person not found"))
            data = _person_data(person)
        return Return.ok(HandlerResponse(msg="Person found", data=data))

    async def get_person_by_name(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(PersonNameParams, params, scalar_field="name")
        if parsed.is_err():
            return Return.err(parsed.error)

        async with ctx.uow:
            person = await ctx.uow.persons.get_by_name(parsed.value.name)
            if person is None:
                return Return.err(Errors.not_found("Person not found"))
            data = _person_data(person)
        return Return.ok(HandlerResponse(msg="Person found", data=data))

    async def create_person(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(CreatePersonParams, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        async with ctx.uow:
            person = await ctx.uow.persons.create(
                Person(name=parsed.value.name, last_name=parsed.value.last_name)
            )
            await ctx.uow.commit()

        logger.info(f"Person {person.id} created")
        return Return.ok(
            HandlerResponse(code=201, msg="Person created", data=_person_data(person))
        )

    async def update_person(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(UpdatePersonParams, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        command = parsed.value
        async with ctx.uow:
            person = await ctx.uow.persons.get_by_id(command.id)
            if person is None:
                return Return.err(Errors.not_found("Person not found"))

            if command.name is not None:
                person.name = command.name
            if command.last_name is not None:
                person.last_name = command.last_name
            person = await ctx.uow.persons.update(person)
            await ctx.uow.commit()

        return Return.ok(HandlerResponse(msg="Person updated", data=_person_data(person)))

    async def delete_person(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(PersonIdParams, params, scalar_field="id")
        if parsed.is_err():
            return Return.err(parsed.error)

        async with ctx.uow:
            person = await ctx.uow.persons.get_by_id(parsed.value.id)
            if person is None:
                return Return.err(Errors.not_found("Person not found"))
            await ctx.uow.persons.delete(person)
            await ctx.uow.commit()

        logger.info(f"Person {parsed.value.id} deleted")
        return Return.ok(HandlerResponse(msg="Person deleted"))

    operations = {
        "getPerson": get_person,
        "getPersonByName": get_person_by_name,
        "createPerson": create_person,
        "updatePerson": update_person,
        "deletePerson": delete_person,
    }
