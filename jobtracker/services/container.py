from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

from jobtracker.config import get_config
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.broadcast_hub import BroadcastHub

config = get_config()


async def load_snapshot() -> List[Dict[str, Any]]:
    return await run_in_threadpool(get_application_service().list_applications)


# Initialize services
application_service = ApplicationService(config)
broadcast_hub = BroadcastHub(
    load_snapshot,
    send_timeout=config.broadcast.send_timeout,
    max_pending=config.broadcast.max_pending,
)


# Resolved at call time so tests can swap the instances above
def get_application_service() -> ApplicationService:
    return application_service


def get_broadcast_hub() -> BroadcastHub:
    return broadcast_hub
