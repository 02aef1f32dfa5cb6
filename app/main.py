from dotenv import load_dotenv

load_dotenv()

from server import server  # noqa: E402  pylint: disable=wrong-import-position

server_app = server.handler
