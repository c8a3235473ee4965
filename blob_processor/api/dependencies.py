"""
FastAPI dependency injection.

Dependencies provide the gateway and configuration to route handlers.
Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Resource lifecycle (the storage client) is tied to application
  startup/shutdown instead of module import

The gateway itself is built once in the lifespan handler and kept on
app.state; the dependency only hands it out.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..config.settings import Settings, get_settings
from ..core.blobs.gateway import BlobGateway


def get_blob_gateway(request: Request) -> BlobGateway:
    """
    Provide the process-wide BlobGateway.

    Raises if the application was started without its lifespan handler
    (e.g. a TestClient used outside a `with` block), since there is then no
    storage client to hand out.
    """
    gateway = getattr(request.app.state, "blob_gateway", None)
    if gateway is None:
        raise RuntimeError("Blob gateway is not initialized. Was the application lifespan started?")
    return gateway


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
BlobGatewayDep = Annotated[BlobGateway, Depends(get_blob_gateway)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
