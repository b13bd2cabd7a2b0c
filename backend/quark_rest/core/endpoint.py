"""EndPoint — where a named service listens.

Invariants:
    - generate_service_url() has no trailing slash
    - path is the service's mount point ("/<name>" when not given)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EndPoint:
    name: str
    host: str = "127.0.0.1"
    port: int = 8000
    scheme: str = "http"
    path: str = ""

    @property
    def service_path(self) -> str:
        return "/" + (self.path or self.name).strip("/")

    def generate_service_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.service_path}"
