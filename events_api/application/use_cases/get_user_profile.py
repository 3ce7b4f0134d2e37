"""Get user profile use case"""

from ...domain.enums import UserStatus
from ...domain.errors import NotFoundError
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ..dtos.user_dtos import UserDto


class GetUserProfileUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId) -> UserDto:
        """Get user profile by ID"""
        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_id(user_id)

        if user is None or user.status == UserStatus.DELETED:
            raise NotFoundError("User", user_id)
        return UserDto.from_entity(user)
