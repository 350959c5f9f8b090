"""
Persona routes: built-in presets and user-defined personas.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from ..constants import PRESET_PERSONAS
from ..database import get_db
from ..errors import ValidationError
from ..models.persona import CustomPersona
from ..models.user import User
from ..schemas.persona import PersonaCreate, PersonaUpdate, PersonaResponse, PresetPersona
from ..utils.ownership import get_owned_or_raise
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/personas", tags=["Personas"])


@router.get("/presets")
async def list_presets():
    """Built-in personas; available without signing in."""
    return {"personas": [PresetPersona(**p) for p in PRESET_PERSONAS]}


@router.get("")
async def list_personas(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(CustomPersona)
        .filter(CustomPersona.user_id == current_user.id)
        .order_by(desc(CustomPersona.created_at), desc(CustomPersona.id))
    )
    return {"personas": [PersonaResponse.model_validate(p) for p in result.scalars().all()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_persona(
    persona_data: PersonaCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    name = (persona_data.name or "").strip()
    system_prompt = (persona_data.system_prompt or "").strip()
    if not name or not system_prompt:
        raise ValidationError("Name and system_prompt are required")

    fields = persona_data.model_dump(exclude_none=True)
    fields.update(name=name, system_prompt=system_prompt)

    persona = CustomPersona(user_id=current_user.id, **fields)
    db.add(persona)
    await db.commit()
    await db.refresh(persona)

    return {"persona": PersonaResponse.model_validate(persona)}


@router.patch("/{persona_id}")
async def update_persona(
    persona_id: int,
    updates: PersonaUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    persona = await get_owned_or_raise(db, CustomPersona, persona_id, current_user.id, "Persona")
    changes = updates.model_dump(exclude_unset=True)

    for field in ("name", "system_prompt", "role", "avatar"):
        if field in changes and not (changes[field] or "").strip():
            raise ValidationError(f"{field} cannot be empty", field=field)
    if "description" in changes and changes["description"] is None:
        changes["description"] = ""

    for key, value in changes.items():
        setattr(persona, key, value)

    await db.commit()
    await db.refresh(persona)

    return {"persona": PersonaResponse.model_validate(persona)}


@router.delete("/{persona_id}")
async def delete_persona(
    persona_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    persona = await get_owned_or_raise(db, CustomPersona, persona_id, current_user.id, "Persona")
    await db.delete(persona)
    await db.commit()

    return {"success": True}
