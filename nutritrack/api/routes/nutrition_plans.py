"""Nutrition plan routes. Creation is gated by the caller's active subscription."""

import uuid
from datetime import date

from fastapi import APIRouter, Query, Response, status

from nutritrack.api.deps import CurrentUser, DB
from nutritrack.schemas.nutrition_plans import (
    NutritionPlanCreateRequest,
    NutritionPlanResponse,
    NutritionPlanUpdateRequest,
)
from nutritrack.services.nutrition_plan_service import NutritionPlanService
from nutritrack.utils.envelopes import api_page, api_success

router = APIRouter(tags=["nutrition-plans"])


@router.post("/nutrition-plans", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_nutrition_plan(payload: NutritionPlanCreateRequest, current_user: CurrentUser, db: DB):
    nutrition_plan = await NutritionPlanService(db).create(current_user.id, payload)
    return api_success(NutritionPlanResponse.model_validate(nutrition_plan).model_dump())


@router.get("/nutrition-plans", response_model=dict)
async def list_nutrition_plans(
    current_user: CurrentUser,
    db: DB,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
):
    items, total = await NutritionPlanService(db).list_for_user(current_user.id, page, size)
    return api_page(
        [NutritionPlanResponse.model_validate(item).model_dump() for item in items],
        page=page,
        size=size,
        total=total,
    )


@router.get("/nutrition-plans/today", response_model=dict)
async def get_today_nutrition_plan(current_user: CurrentUser, db: DB):
    nutrition_plan = await NutritionPlanService(db).get_for_date(current_user.id, date.today())
    return api_success(NutritionPlanResponse.model_validate(nutrition_plan).model_dump())


# Fixed paths must be registered before /nutrition-plans/{nutrition_plan_id}
@router.get("/nutrition-plans/week", response_model=dict)
async def get_current_week(current_user: CurrentUser, db: DB):
    week = await NutritionPlanService(db).get_week(current_user.id, date.today())
    return api_success(week.model_dump())


@router.get("/nutrition-plans/week/{reference_date}", response_model=dict)
async def get_week(reference_date: date, current_user: CurrentUser, db: DB):
    """Week (Monday to Sunday) containing ``reference_date``, formatted YYYY-MM-DD."""
    week = await NutritionPlanService(db).get_week(current_user.id, reference_date)
    return api_success(week.model_dump())


@router.get("/nutrition-plans/pending", response_model=dict)
async def list_pending_nutrition_plans(current_user: CurrentUser, db: DB):
    """Uncompleted plans dated today or earlier, oldest first."""
    items = await NutritionPlanService(db).list_pending(current_user.id, date.today())
    return api_success([NutritionPlanResponse.model_validate(item).model_dump() for item in items])


@router.get("/nutrition-plans/future", response_model=dict)
async def list_future_nutrition_plans(current_user: CurrentUser, db: DB):
    items = await NutritionPlanService(db).list_future(current_user.id, date.today())
    return api_success([NutritionPlanResponse.model_validate(item).model_dump() for item in items])


@router.get("/nutrition-plans/{nutrition_plan_id}", response_model=dict)
async def get_nutrition_plan(nutrition_plan_id: uuid.UUID, current_user: CurrentUser, db: DB):
    nutrition_plan = await NutritionPlanService(db).get(current_user.id, nutrition_plan_id)
    return api_success(NutritionPlanResponse.model_validate(nutrition_plan).model_dump())


@router.put("/nutrition-plans/{nutrition_plan_id}", response_model=dict)
async def update_nutrition_plan(
    nutrition_plan_id: uuid.UUID,
    payload: NutritionPlanUpdateRequest,
    current_user: CurrentUser,
    db: DB,
):
    nutrition_plan = await NutritionPlanService(db).update(current_user.id, nutrition_plan_id, payload)
    return api_success(NutritionPlanResponse.model_validate(nutrition_plan).model_dump())


@router.patch("/nutrition-plans/{nutrition_plan_id}/completion", response_model=dict)
async def toggle_nutrition_plan_completion(nutrition_plan_id: uuid.UUID, current_user: CurrentUser, db: DB):
    nutrition_plan = await NutritionPlanService(db).toggle_completion(current_user.id, nutrition_plan_id)
    return api_success(NutritionPlanResponse.model_validate(nutrition_plan).model_dump())


@router.delete("/nutrition-plans/{nutrition_plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_nutrition_plan(nutrition_plan_id: uuid.UUID, current_user: CurrentUser, db: DB):
    await NutritionPlanService(db).delete(current_user.id, nutrition_plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
