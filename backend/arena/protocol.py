"""Wire protocol: canonical event names and client payload schemas.

Every client payload is validated here before it reaches the session
coordinator. Wire keys are camelCase.
"""

from typing import ClassVar, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, ValidationError

from arena.services.errors import InvalidCellIndex, InvalidPayload

PROTOCOL_VERSION = 1

# Client -> server
REGISTER = 'register'
CREATE_GAME = 'create-game'
JOIN_GAME = 'join-game'
MAKE_MOVE = 'make-move'
LEAVE_GAME = 'leave-game'
REQUEST_REMATCH = 'request-rematch'
ACCEPT_REMATCH = 'accept-rematch'
REJECT_REMATCH = 'reject-rematch'
CHAT_MESSAGE = 'chat-message'
GET_GAMES = 'get-games'
GET_STATS = 'get-stats'
GET_LEADERBOARD = 'get-leaderboard'


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra='ignore')

    # Field that a bare string payload is assigned to, if any
    bare_field: ClassVar[Optional[str]] = None


class Register(Payload):
    bare_field: ClassVar[Optional[str]] = 'displayName'

    display_name: str = Field('', validation_alias=AliasChoices('displayName', 'username'))


class CreateGame(Payload):
    bare_field: ClassVar[Optional[str]] = 'name'

    name: Optional[str] = None


class MatchRef(Payload):
    bare_field: ClassVar[Optional[str]] = 'matchId'

    match_id: str = Field(alias='matchId', min_length=1)


class MakeMove(MatchRef):
    bare_field: ClassVar[Optional[str]] = None

    cell_index: StrictInt = Field(alias='cellIndex')


class ChatMessage(MatchRef):
    bare_field: ClassVar[Optional[str]] = None

    text: str


class GetStats(Payload):
    bare_field: ClassVar[Optional[str]] = 'username'

    username: Optional[str] = None


class GetLeaderboard(Payload):
    limit: Optional[StrictInt] = Field(None, ge=1, le=100)


def parse(model, data):
    """Validate a raw Socket.IO payload into ``model``.

    Raises ``InvalidPayload`` (or ``InvalidCellIndex`` for a bad cell) so
    the caller can report it like any other rejected request.
    """
    if data is None:
        data = {}
    elif isinstance(data, str) and model.bare_field:
        data = {model.bare_field: data}
    if not isinstance(data, dict):
        raise InvalidPayload(f'Expected an object for {model.__name__}')
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        if any(err['loc'] and err['loc'][0] in ('cellIndex', 'cell_index') for err in errors):
            raise InvalidCellIndex() from exc
        fields = ', '.join(str(err['loc'][0]) for err in errors if err['loc'])
        raise InvalidPayload(f'Invalid or missing field(s): {fields}' if fields else None) from exc
