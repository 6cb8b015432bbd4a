class Transport:
    """Outbound half of the messaging channel, as seen by the coordinator."""

    def send(self, connection_id: str, event: str, payload) -> None:
        raise NotImplementedError

    def broadcast(self, event: str, payload) -> None:
        raise NotImplementedError


class SocketIOTransport(Transport):
    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection_id, event, payload):
        # Use socketio.emit since this may be called outside a request context
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)

    def broadcast(self, event, payload):
        self.socketio.emit(event, payload, namespace=self.namespace)
