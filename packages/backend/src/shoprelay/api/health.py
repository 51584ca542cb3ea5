"""Health check endpoint.

Learn: Besides "the process is up", reports how many sockets and
distinct users are currently connected — handy when checking that the
frontend actually reaches the relay.
"""

from fastapi import APIRouter, Depends

from shoprelay import __version__
from shoprelay.realtime.state import RelayState, get_relay_state
from shoprelay.schemas.notify import HealthRead

router = APIRouter()


@router.get("/health", response_model=HealthRead)
async def health_check(state: RelayState = Depends(get_relay_state)):
    return HealthRead(
        status="ok",
        version=__version__,
        connections=len(state.registry),
        users=state.registry.user_count,
    )
