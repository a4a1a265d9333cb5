"""Plan catalog routes. Reads are public; changes require an administrator."""

import uuid

from fastapi import APIRouter, Response, status

from nutritrack.api.deps import AdminUser, DB
from nutritrack.schemas.plans import PlanRequest, PlanResponse
from nutritrack.services.plan_service import PlanService
from nutritrack.utils.envelopes import api_success

router = APIRouter(tags=["plans"])


@router.get("/plans", response_model=dict)
async def list_active_plans(db: DB):
    plans = await PlanService.list_active_plans(db)
    return api_success([PlanResponse.model_validate(p).model_dump() for p in plans])


@router.get("/plans/all", response_model=dict)
async def list_all_plans(admin: AdminUser, db: DB):
    plans = await PlanService.list_all_plans(db)
    return api_success([PlanResponse.model_validate(p).model_dump() for p in plans])


@router.get("/plans/{plan_id}", response_model=dict)
async def get_plan(plan_id: uuid.UUID, db: DB):
    plan = await PlanService.get_plan(db, plan_id)
    return api_success(PlanResponse.model_validate(plan).model_dump())


@router.post("/plans", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_plan(payload: PlanRequest, admin: AdminUser, db: DB):
    plan = await PlanService.create_plan(
        db,
        name=payload.name,
        price=payload.price,
        description=payload.description,
        nutrition_plan_limit=payload.nutrition_plan_limit,
        created_by=admin.id,
    )
    return api_success(PlanResponse.model_validate(plan).model_dump())


@router.put("/plans/{plan_id}", response_model=dict)
async def update_plan(plan_id: uuid.UUID, payload: PlanRequest, admin: AdminUser, db: DB):
    plan = await PlanService.update_plan(
        db,
        plan_id,
        name=payload.name,
        price=payload.price,
        description=payload.description,
        nutrition_plan_limit=payload.nutrition_plan_limit,
        updated_by=admin.id,
    )
    return api_success(PlanResponse.model_validate(plan).model_dump())


@router.patch("/plans/{plan_id}/activate", status_code=status.HTTP_204_NO_CONTENT)
async def activate_plan(plan_id: uuid.UUID, admin: AdminUser, db: DB):
    await PlanService.activate_plan(db, plan_id, updated_by=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/plans/{plan_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_plan(plan_id: uuid.UUID, admin: AdminUser, db: DB):
    await PlanService.deactivate_plan(db, plan_id, updated_by=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(plan_id: uuid.UUID, admin: AdminUser, db: DB):
    await PlanService.delete_plan(db, plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
