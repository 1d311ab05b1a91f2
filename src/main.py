import asyncio
import logging
import signal
import sys
import uvicorn
from typing import Optional

from .config import settings
from .state import PauseEventStore
from .clients.player import SimulatedPlayer
from .service import PauseSyncService
from . import server

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("main")

class PauseSyncApp:
    def __init__(self):
        self.store = PauseEventStore(settings.PAUSE_MAP_PATH if settings.PERSIST_ENABLED else None)
        self.player: Optional[SimulatedPlayer] = None
        self.service: Optional[PauseSyncService] = None

    def setup(self):
        loop = asyncio.get_running_loop()
        self.player = SimulatedPlayer(clock=loop.time)
        self.service = PauseSyncService(self.store, self.player, loop=loop)
        if settings.MEDIA_SOURCE:
            self.service.load_source(settings.MEDIA_SOURCE)
        self.service.set_demo_mode(settings.DEMO_MODE)

        # Link service to server module
        server.service = self.service

    async def start(self):
        self.setup()

        tasks = [asyncio.create_task(self.player.run())]

        if settings.HTTP_SERVER_ENABLED:
            config = uvicorn.Config(server.app, host="0.0.0.0", port=settings.HTTP_SERVER_PORT, log_level="warning")
            server_task = uvicorn.Server(config).serve()
            tasks.append(asyncio.create_task(server_task))

        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            pass
        finally:
            self.service.close()
            self.player.close()
            self.store.save()

def handle_sigterm(sig, frame):
    logger.info("Received SIGTERM, shutting down...")
    sys.exit(0)

if __name__ == "__main__":
    signal.signal(signal.SIGTERM, handle_sigterm)
    app = PauseSyncApp()
    try:
        asyncio.run(app.start())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
