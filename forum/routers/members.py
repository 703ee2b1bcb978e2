from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from forum.database import get_db
from forum.errors import ErrorKind, ServiceError, unwrap
from forum.schemas import MemberCreate, MemberResponse
from forum.services import member_service

router = APIRouter(prefix="/api/v1/members", tags=["members"])

@router.post("", status_code=201, response_model=MemberResponse)
async def create_member(data: MemberCreate, db: AsyncSession = Depends(get_db)):
    try:
        return unwrap(await member_service.create_member(db, data))
    except IntegrityError:
        # Lost a race against a concurrent registration with the same email or nickname.
        unwrap(ServiceError(ErrorKind.DUPLICATE_MEMBER))

@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(member_id: int, db: AsyncSession = Depends(get_db)):
    return unwrap(await member_service.get_member(db, member_id))
