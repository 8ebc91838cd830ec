"""
Base command for encapsulating search operations.

The Command pattern encapsulates an operation as an object that depends
only on repositories, so it can be reused by any caller (service layer,
scripts, tests) and tested in isolation with repository mocks.

Example:
    ```python
    from member_search.commands.base import BaseCommand


    class FindByUsernameCommand(BaseCommand[str, list[Member]]):
        def __init__(self, repository: MemberRepository):
            self.repository = repository

        async def execute(self, input_data: str) -> list[Member]:
            return await self.repository.find_by_username(input_data)


    async with read_session() as session:
        command = FindByUsernameCommand(MemberRepository(session))
        members = await command.execute("member1")
    ```
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BaseCommand(ABC, Generic[TInput, TOutput]):
    """
    Base command for search operations.

    Type Parameters:
        TInput: Input data type (usually a Pydantic model).
        TOutput: Output data type.
    """

    @abstractmethod
    async def execute(self, input_data: TInput) -> TOutput:
        """
        Execute the command.

        Args:
            input_data: Input data for the command.

        Returns:
            Result of the command execution.

        Raises:
            ValidationError: For invalid pagination input.
            NotFoundError: When a referenced entity does not exist.
            StoreError: When the store fails.
        """
        pass
