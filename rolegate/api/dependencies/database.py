"""
Database dependencies.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.gate import RoleGate


def get_gate(request: Request) -> RoleGate:
    """The RoleGate attached to the running app."""
    return request.app.state.gate


async def get_db(gate: RoleGate = Depends(get_gate)) -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with gate.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
