"""Supabase Realtime broadcast adapter."""

from dataclasses import dataclass

import httpx

from geomeet.services.broadcast import SessionPublisher


@dataclass
class HttpxRealtimePublisher(SessionPublisher):
    """Publish broadcast messages through Supabase Realtime's REST endpoint."""

    supabase_url: str
    api_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, supabase_url: str, api_key: str) -> "HttpxRealtimePublisher":
        """Create a publisher with a managed httpx session."""
        return cls(
            supabase_url=supabase_url,
            api_key=api_key,
            http_client=httpx.AsyncClient(),
        )

    async def publish(self, channel: str, payload: dict[str, object]) -> None:
        """Send one broadcast message to the channel."""
        url = f"{self.supabase_url.rstrip('/')}/realtime/v1/api/broadcast"
        body = {
            "messages": [
                {
                    "topic": channel,
                    "event": str(payload.get("event", "update")),
                    "payload": payload,
                }
            ]
        }
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        response = await self.http_client.post(
            url, json=body, headers=headers, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
