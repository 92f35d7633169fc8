from fastapi import APIRouter

from app.api.channels import router as channels_router
from app.api.groups import router as groups_router
from app.api.media import router as media_router
from app.api.messages import router as messages_router
from app.api.typing import router as typing_router
from app.api.users import router as users_router

router = APIRouter()

router.include_router(users_router)
router.include_router(channels_router)
router.include_router(groups_router)
router.include_router(messages_router)
router.include_router(typing_router)
router.include_router(media_router)


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to the Parley API"}
