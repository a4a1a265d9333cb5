from fastapi import APIRouter

from nutritrack.api.deps import CurrentUser, DB
from nutritrack.schemas.auth import UserResponse, UserUpdateRequest
from nutritrack.utils.envelopes import api_success

router = APIRouter(tags=["users"])


@router.get("/users/me", response_model=dict)
async def get_current_user_endpoint(current_user: CurrentUser):
	return api_success(UserResponse.model_validate(current_user).model_dump())


@router.patch("/users/me", response_model=dict)
async def update_current_user_endpoint(
	payload: UserUpdateRequest,
	current_user: CurrentUser,
	db: DB,
):
	if payload.name is not None and payload.name != current_user.name:
		current_user.name = payload.name
		current_user.updated_by = current_user.id
		await db.commit()
		await db.refresh(current_user)

	return api_success(UserResponse.model_validate(current_user).model_dump())
