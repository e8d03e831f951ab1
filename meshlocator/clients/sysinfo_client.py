from meshlocator.clients.base import BaseJSONClient
from meshlocator.models.common import FetchResult

DEFAULT_SYSINFO_PATH = "/cgi-bin/sysinfo.json"


class SysinfoClient(BaseJSONClient):
    """Fetches a mesh node's self-reported status document.

    The timeout is kept short: a lookup may probe several candidate addresses
    one after another, and most of them will not answer at all.
    """

    def __init__(self, sysinfo_path: str = DEFAULT_SYSINFO_PATH, timeout_seconds: float = 1.5) -> None:
        super().__init__(timeout_seconds)
        self._sysinfo_path = "/" + sysinfo_path.lstrip("/")

    def url_for(self, ip: str) -> str:
        return f"http://{ip}{self._sysinfo_path}"

    async def fetch(self, ip: str) -> FetchResult:
        """Fetch the status document served by the node at `ip`."""
        return await self._request(self.url_for(ip))
