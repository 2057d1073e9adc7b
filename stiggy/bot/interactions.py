"""Discord interaction payloads and response builders."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from stiggy.core.enums import EPHEMERAL_FLAG, InteractionResponseType


class InteractionOption(BaseModel):
    name: str
    type: int
    value: Any = None
    focused: bool = False
    options: list["InteractionOption"] = Field(default_factory=list)


class InteractionData(BaseModel):
    id: Optional[str] = None
    name: str
    options: list[InteractionOption] = Field(default_factory=list)


class DiscordUser(BaseModel):
    id: str
    username: str = ""
    global_name: Optional[str] = None


class InteractionMember(BaseModel):
    user: DiscordUser
    nick: Optional[str] = None


class Interaction(BaseModel):
    """Incoming interaction (guild or DM). Unknown fields are ignored."""

    id: str = ""
    type: int
    token: str = ""
    guild_id: Optional[str] = None
    data: Optional[InteractionData] = None
    member: Optional[InteractionMember] = None
    user: Optional[DiscordUser] = None

    @property
    def command_name(self) -> str:
        return self.data.name if self.data else ""

    @property
    def author(self) -> DiscordUser | None:
        """Invoking user; guild interactions carry it on ``member``."""
        if self.member:
            return self.member.user
        return self.user

    @property
    def author_name(self) -> str:
        if self.member and self.member.nick:
            return self.member.nick
        author = self.author
        if author is None:
            return "unknown"
        return author.global_name or author.username

    def option(self, name: str, default: Any = None) -> Any:
        if self.data:
            for opt in self.data.options:
                if opt.name == name:
                    return opt.value
        return default

    def require(self, name: str) -> Any:
        """Value of a required option; missing means a malformed payload."""
        value = self.option(name)
        if value is None:
            raise ValueError(f"Missing required option '{name}'")
        return value

    def focused_option(self) -> InteractionOption | None:
        if self.data:
            for opt in self.data.options:
                if opt.focused:
                    return opt
        return None


def message_response(
    content: str | None = None,
    embeds: list[dict[str, Any]] | None = None,
    ephemeral: bool = False,
) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if content is not None:
        data["content"] = content
    if embeds:
        data["embeds"] = embeds
    if ephemeral:
        data["flags"] = EPHEMERAL_FLAG
    return {
        "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE.value,
        "data": data,
    }


def autocomplete_response(choices: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "type": InteractionResponseType.APPLICATION_COMMAND_AUTOCOMPLETE_RESULT.value,
        "data": {"choices": [{"name": name, "value": value} for name, value in choices]},
    }


def pong_response() -> dict[str, Any]:
    return {"type": InteractionResponseType.PONG.value}


def deferred_response(ephemeral: bool = False) -> dict[str, Any]:
    """Acknowledge now and show "thinking…" until the reply is edited in."""
    response: dict[str, Any] = {
        "type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE.value
    }
    if ephemeral:
        response["data"] = {"flags": EPHEMERAL_FLAG}
    return response
