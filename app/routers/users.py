from fastapi import APIRouter, Depends, HTTPException, status
from structlog import get_logger

from app.dependencies.rate_limit import rate_limit
from app.dependencies.storage import get_storage
from app.schemas.user import UserCreate, UserResponse
from app.storage import Storage, UsernameTakenError

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["users"])


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(times=5, seconds=60))],
)
async def register_user(request: UserCreate, store: Storage = Depends(get_storage)):
    try:
        user = await store.create_user(request)
        logger.info("User registered", user_id=user.id)
        return user
    except UsernameTakenError as e:
        logger.warning("Username already taken", username=e.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error("Register user failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to register user")


@router.get("/users/{id}", response_model=UserResponse)
async def get_user(id: int, store: Storage = Depends(get_storage)):
    user = await store.get_user(id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
