from .logger import configure_logging
from .routes import battle_bp
from .sockets import register_battle_socket_handlers


def init_mech_duel(app, socketio):
    if app.config.get("MECHDUEL_LOG_LEVEL"):
        configure_logging(
            app.config["MECHDUEL_LOG_LEVEL"],
            json=app.config.get("MECHDUEL_LOG_JSON", False),
            logfile=app.config.get("MECHDUEL_LOG_FILE"),
        )
    app.register_blueprint(battle_bp)
    register_battle_socket_handlers(socketio)
