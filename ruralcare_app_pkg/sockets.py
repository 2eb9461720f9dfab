# ruralcare_app_pkg/sockets.py
from flask import request, current_app
from flask_socketio import SocketIO, join_room
from .utils import decode_access_token

# Create the SocketIO instance but don't attach it to the app yet
socketio = SocketIO()


@socketio.on('connect')
def handle_connect():
    """
    Handles a new client connection.
    The client must provide a valid JWT (?token=...) to be placed in its user and role rooms.
    """
    access_token = request.args.get('token')
    if not access_token:
        return False # Reject connection if no token is provided

    identity = decode_access_token(access_token)
    if identity is None:
        return False # Reject connection if token is invalid

    # A private room for this account, and a shared room for everyone with the same role.
    join_room(f"user:{identity.id}")
    join_room(f"role:{identity.role}")
    current_app.logger.info(f"Socket client connected: user_id {identity.id} ({identity.role})")


@socketio.on('disconnect')
def handle_disconnect(*args):
    # Socket.IO handles room cleanup on disconnect automatically.
    current_app.logger.info("Socket client disconnected")


def notify_change(event, payload, user_id=None, roles=None):
    """
    Tells connected clients that something they display has changed.
    With no user_id/roles the event is broadcast to every connected client.
    """
    rooms = []
    if user_id is not None:
        rooms.append(f"user:{user_id}")
    for role in roles or ():
        rooms.append(f"role:{role}")
    socketio.emit(event, payload, to=rooms or None)
