# run.py
import os
from dotenv import load_dotenv
load_dotenv()

from ruralcare_app_pkg import create_app
from ruralcare_app_pkg.sockets import socketio

config_name = os.environ.get('FLASK_ENV', 'development')
app = create_app(config_name)

if __name__ == '__main__':
    socketio.run(app, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
