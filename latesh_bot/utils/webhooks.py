"""
Webhook Utilities Module

Raw webhook delivery over aiohttp, a small in-memory webhook registry,
and the channel forwarding configuration used by /forward-setup.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from .. import config

logger = logging.getLogger(__name__)

# Source channel ID -> {"webhook_url": str, "filter": Optional[str]}
forwarding_configs: Dict[int, Dict[str, Any]] = {}

HIDDEN_CONTENT_PLACEHOLDER = "[Message content hidden - Enable Message Content Intent]"


async def post_webhook(webhook_url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST a JSON payload to a Discord webhook URL"""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(webhook_url, json=payload) as response:
                if 200 <= response.status < 300:
                    data = None
                    if response.status != 204:
                        data = await response.json(content_type=None)
                    return {"success": True, "status": response.status, "data": data}

                body = await response.text()
                logger.error(f"Webhook POST failed ({response.status}): {body[:200]}")
                return {"success": False, "status": response.status, "error": body or str(response.status)}
    except aiohttp.ClientError as e:
        logger.error(f"Webhook POST error: {e}")
        return {"success": False, "error": str(e)}


async def fetch_image_bytes(url: str) -> Optional[bytes]:
    """Download an image, e.g. a webhook avatar. Returns None on failure."""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                if response.status == 200:
                    return await response.read()
                logger.warning(f"Image download returned {response.status}: {url}")
    except aiohttp.ClientError as e:
        logger.warning(f"Image download failed for {url}: {e}")
    return None


class WebhookManager:
    """
    In-memory registry of named webhook targets plus helpers for sending
    messages, embeds and file links through them.
    """

    def __init__(self):
        self.webhooks: Dict[str, Dict[str, Any]] = {}

    def add_webhook(self, webhook_id: str, webhook_config: Dict[str, Any]):
        self.webhooks[webhook_id] = {
            "url": webhook_config["url"],
            "username": webhook_config.get("username") or config.DEFAULT_WEBHOOK_USERNAME,
            "avatar": webhook_config.get("avatar"),
            "channel": webhook_config.get("channel"),
            "created_at": datetime.now(timezone.utc),
        }

    def remove_webhook(self, webhook_id: str) -> bool:
        return self.webhooks.pop(webhook_id, None) is not None

    def get_webhook(self, webhook_id: str) -> Optional[Dict[str, Any]]:
        return self.webhooks.get(webhook_id)

    def get_all_webhooks(self) -> List[Dict[str, Any]]:
        return [{"id": webhook_id, **data} for webhook_id, data in self.webhooks.items()]

    def resolve_url(self, target: Optional[str]) -> Optional[str]:
        """The registered URL when target is a webhook ID, else target unchanged"""
        registered = self.get_webhook(target) if target else None
        return registered["url"] if registered else target

    @staticmethod
    def _identity(username: Optional[str], avatar: Optional[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"username": username or config.DEFAULT_WEBHOOK_USERNAME}
        if avatar:
            payload["avatar_url"] = avatar
        return payload

    async def send_message(self, webhook_url: str, message: str,
                           username: Optional[str] = None, avatar: Optional[str] = None) -> Dict[str, Any]:
        payload = {"content": message, **self._identity(username, avatar)}
        return await post_webhook(webhook_url, payload)

    async def send_embed(self, webhook_url: str, embed: Dict[str, Any],
                         username: Optional[str] = None, avatar: Optional[str] = None) -> Dict[str, Any]:
        payload = {"embeds": [embed], **self._identity(username, avatar)}
        return await post_webhook(webhook_url, payload)

    async def send_file(self, webhook_url: str, file_url: str, message: str = "",
                        username: Optional[str] = None, avatar: Optional[str] = None) -> Dict[str, Any]:
        """Files are sent as links appended to the message body"""
        content = f"{message}\n{file_url}" if file_url else message
        return await self.send_message(webhook_url, content, username, avatar)

    async def validate_webhook(self, webhook_url: str) -> Dict[str, Any]:
        result = await post_webhook(webhook_url, {
            "content": "Webhook validation test - please ignore",
            "username": "Latesh Bot Validator",
        })
        if result["success"]:
            return {"valid": True, "status": result["status"]}
        return {"valid": False, "error": result.get("status") or result.get("error")}

    @staticmethod
    def format_message(content: str, author=None, include_author: bool = False,
                       include_timestamp: bool = False, guild_name: Optional[str] = None) -> str:
        formatted = content
        if include_author and author is not None:
            formatted = f"**{author.display_name}**: {formatted}"
        if include_timestamp:
            formatted += f"\n*{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}*"
        if guild_name:
            formatted += f"\n*From: {guild_name}*"
        return formatted

    @staticmethod
    def create_embed_from_message(message, color: int = config.COLOR_INFO,
                                  fields: Optional[List[Dict[str, Any]]] = None,
                                  footer: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build a webhook embed payload mirroring a Discord message"""
        embed: Dict[str, Any] = {
            "description": message.content or "No content",
            "color": color,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "author": {
                "name": message.author.display_name,
                "icon_url": str(message.author.display_avatar.url),
            },
            "footer": footer or {"text": "Forwarded by Latesh Analysis Bot"},
        }
        if fields:
            embed["fields"] = fields

        for attachment in message.attachments:
            if (attachment.content_type or "").startswith("image/"):
                embed["image"] = {"url": attachment.url}
                break
        return embed


webhook_manager = WebhookManager()


def set_forwarding(channel_id: int, webhook_url: str, message_filter: Optional[str] = None, as_embed: bool = False):
    forwarding_configs[channel_id] = {"webhook_url": webhook_url, "filter": message_filter, "embed": as_embed}


def get_forwarding(channel_id: int) -> Optional[Dict[str, Any]]:
    return forwarding_configs.get(channel_id)


def message_passes_filter(content: str, message_filter: Optional[str]) -> bool:
    """Case-insensitive regex search. Invalid patterns block forwarding."""
    if not message_filter or not content:
        return True
    try:
        return re.search(message_filter, content, re.IGNORECASE) is not None
    except re.error as e:
        logger.warning(f"Invalid forwarding filter {message_filter!r}: {e}")
        return False


def build_forward_payload(message) -> Dict[str, Any]:
    content = message.content or HIDDEN_CONTENT_PLACEHOLDER
    if message.attachments:
        content += "\n\n**Attachments:**\n" + "\n".join(att.url for att in message.attachments)
    return {
        "content": content,
        "username": message.author.display_name,
        "avatar_url": str(message.author.display_avatar.url),
    }


async def forward_message(message) -> bool:
    """Forward a message if its channel has a forwarding config"""
    forward_config = get_forwarding(message.channel.id)
    if not forward_config:
        return False

    if not message_passes_filter(message.content, forward_config.get("filter")):
        return False

    if forward_config.get("embed"):
        result = await webhook_manager.send_embed(
            forward_config["webhook_url"],
            WebhookManager.create_embed_from_message(message),
            message.author.display_name,
            str(message.author.display_avatar.url),
        )
    else:
        result = await post_webhook(forward_config["webhook_url"], build_forward_payload(message))
    if result["success"]:
        logger.info(f"Forwarded message from {message.author}")
    return result["success"]
