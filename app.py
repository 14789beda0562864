import logging
import random
from datetime import datetime

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_sqlalchemy import SQLAlchemy

from checkout import MAX_CHECKOUT, MIN_CHECKOUT, compute_checkout, valid_checkout_doubles
from game import GameSession, build_history
from opponent import accuracy, ai_player_info, simulate_throw, visualization_data
from segments import Segment, parse_segment
from state import GameRules, Player, Throw

# Basic logging setup for debugging endpoints and important events.
# The level is adjusted from LOG_LEVEL once the app is configured.
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

db = SQLAlchemy()
api = Blueprint("darts", __name__)

SESSIONS_KEY = "darts_sessions"
RNG_KEY = "darts_rng"


# Models
class Settings(db.Model):
    """
    Single-row settings table for the operator knobs that outlive a game.
    """

    id = db.Column(db.Integer, primary_key=True)
    # Scales every AI accuracy radius, 0.5..2.0
    ai_global_multiplier = db.Column(db.Float, default=1.0)
    # Whether clients should draw the AI aiming disc
    show_ai_visualization = db.Column(db.Boolean, default=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "ai_global_multiplier": float(self.ai_global_multiplier) if self.ai_global_multiplier is not None else 1.0,
            "show_ai_visualization": bool(self.show_ai_visualization),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class GameRecord(db.Model):
    """
    A finished (or abandoned) game as written by end_game. The full history, including
    every leg's throw log and the statistics, lives in `payload`.
    """

    id = db.Column(db.String(64), primary_key=True)
    game_type = db.Column(db.String(16), nullable=False)
    winner_id = db.Column(db.String(64), nullable=True)
    started_at = db.Column(db.String(40))
    completed_at = db.Column(db.String(40))
    payload = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def summary(self):
        players = self.payload.get("players", []) if self.payload else []
        return {
            "id": self.id,
            "game_type": self.game_type,
            "winner_id": self.winner_id,
            "players": [p.get("name") for p in players],
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or "config.Config")
    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    app.extensions[SESSIONS_KEY] = {}
    app.extensions[RNG_KEY] = random.Random(app.config.get("AI_SEED"))
    app.register_blueprint(api)

    with app.app_context():
        db.create_all()

    logger.info("darts4you engine ready (database %s)", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


# Helpers
def _sessions():
    return current_app.extensions[SESSIONS_KEY]


def _rng():
    return current_app.extensions[RNG_KEY]


def _store_session(game_id, session):
    sessions = _sessions()
    sessions[game_id] = session
    limit = current_app.config.get("MAX_ACTIVE_GAMES") or 0
    while limit and len(sessions) > limit:
        # dicts keep insertion order, so the first key is the oldest game
        oldest = next(iter(sessions))
        sessions.pop(oldest)
        logger.warning("Dropped abandoned game id=%s (more than %d active games)", oldest, limit)


def _get_session(game_id):
    """Return (session, None) or (None, error response) for an unknown game id."""
    session = _sessions().get(game_id)
    if session is None or session.game_state is None:
        return None, (jsonify({"error": "Game not found"}), 404)
    return session, None


def _ai_multiplier():
    s = Settings.query.first()
    if s and s.ai_global_multiplier is not None:
        return accuracy.clamp_multiplier(s.ai_global_multiplier)
    return current_app.config.get("AI_GLOBAL_MULTIPLIER", 1.0)


def _segment_from_json(raw):
    # null is a miss; accept either {"number", "ring"} or a chart label like "T20"
    if raw is None:
        return None
    if isinstance(raw, str):
        return parse_segment(raw)
    if isinstance(raw, dict):
        return Segment.from_dict(raw)
    raise ValueError("segment must be an object, a label or null")


def _players_from_json(raw_players):
    if not isinstance(raw_players, list) or not raw_players:
        raise ValueError("players must be a non-empty list")
    players = []
    for i, raw in enumerate(raw_players):
        if not isinstance(raw, dict):
            raise ValueError("each player must be an object")
        data = dict(raw)
        data.setdefault("id", f"p{i + 1}")
        players.append(Player.from_dict(data))
    return players


def _state_payload(session):
    state = session.game_state
    payload = state.to_dict()
    player = state.current_player
    payload["current_player_id"] = player.id

    checkout = None
    if not state.rules.is_cricket:
        remaining = state.current_leg.scores[player.id].remaining
        if MIN_CHECKOUT <= remaining <= MAX_CHECKOUT:
            darts_left = max(1, 3 - state.current_throw_in_turn)
            path = compute_checkout(remaining, None, darts_left)
            checkout = path.to_dict() if path.possible else None
    payload["checkout"] = checkout
    payload["bust"] = session.bust_info.to_dict() if session.bust_info else None
    payload["leg_winner"] = session.leg_winner_info.to_dict() if session.leg_winner_info else None
    payload["ai_players"] = {p.id: ai_player_info(p) for p in state.players if p.is_ai}
    return payload


# Routes - service index
@api.route("/")
def index():
    return jsonify(
        {
            "name": "darts4you",
            "endpoints": [
                "/api/settings",
                "/api/new_game",
                "/api/game_state/<game_id>",
                "/api/checkout",
                "/api/checkout/doubles",
                "/api/history",
            ],
        }
    )


@api.route("/health")
def health():
    return jsonify({"status": "ok", "active_games": len(_sessions())})


@api.route("/api/settings", methods=["GET", "POST"])
def settings_api():
    """
    GET: returns settings (single-row). If absent, returns defaults from the config.
    POST: accepts JSON to update fields:
      { "ai_global_multiplier": 0.5..2.0, "show_ai_visualization": true/false }
    """
    if request.method == "GET":
        s = Settings.query.first()
        if not s:
            return jsonify(
                {
                    "ai_global_multiplier": current_app.config.get("AI_GLOBAL_MULTIPLIER", 1.0),
                    "show_ai_visualization": False,
                }
            )
        return jsonify(s.to_dict())

    data = request.json or {}
    multiplier = None
    if "ai_global_multiplier" in data:
        try:
            multiplier = accuracy.clamp_multiplier(data.get("ai_global_multiplier"))
        except (ValueError, TypeError):
            return jsonify({"error": "ai_global_multiplier must be a number"}), 400
    try:
        s = Settings.query.first()
        if not s:
            s = Settings(ai_global_multiplier=current_app.config.get("AI_GLOBAL_MULTIPLIER", 1.0))
            db.session.add(s)
        if multiplier is not None:
            s.ai_global_multiplier = multiplier
        if "show_ai_visualization" in data:
            s.show_ai_visualization = bool(data.get("show_ai_visualization"))
        db.session.commit()
        return jsonify(s.to_dict())
    except Exception as e:
        logger.exception("Failed to update settings: %s", e)
        db.session.rollback()
        return jsonify({"error": "Failed to update settings", "details": str(e)}), 500


# Game lifecycle
@api.route("/api/new_game", methods=["POST"])
def new_game():
    data = request.json or {}
    try:
        rules = GameRules.from_dict(data.get("rules") or {})
        players = _players_from_json(data.get("players"))
        session = GameSession()
        state = session.start_game(rules, players)
    except (ValueError, TypeError, KeyError) as e:
        return jsonify({"error": str(e)}), 400

    _store_session(state.id, session)
    return jsonify(_state_payload(session)), 201


@api.route("/api/game_state/<game_id>", methods=["GET"])
def game_state(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/throw", methods=["POST"])
def record_throw(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    data = request.json or {}
    try:
        segment = _segment_from_json(data.get("segment"))
        coordinates = None
        if data.get("x") is not None and data.get("y") is not None:
            coordinates = (float(data["x"]), float(data["y"]))
    except (ValueError, TypeError, KeyError) as e:
        return jsonify({"error": f"Invalid throw: {e}"}), 400

    player_id = data.get("player_id") or session.current_player.id
    session.record_throw(Throw(segment=segment, player_id=player_id, coordinates=coordinates))
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/ai_throw", methods=["POST"])
def ai_throw(game_id):
    """
    Throw a single dart for the AI player whose turn it is and record it. Clients pace the
    darts themselves and stop once the turn has passed or the leg is decided.
    """
    session, error = _get_session(game_id)
    if error:
        return error
    player = session.current_player
    if not player.is_ai:
        return jsonify({"error": "Current player is not an AI player"}), 400
    state = session.game_state
    if state.match_winner_id or state.current_leg.winner_id or state.current_throw_in_turn >= 3:
        return jsonify({"error": "AI cannot throw now"}), 400

    throw = simulate_throw(state, player.id, player.difficulty or 5, _ai_multiplier(), rng=_rng())
    session.record_throw(throw)
    payload = _state_payload(session)
    payload["throw"] = throw.to_dict()
    return jsonify(payload)


@api.route("/api/games/<game_id>/ai_target", methods=["GET"])
def ai_target(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    player = session.current_player
    if not player.is_ai:
        return jsonify({"error": "Current player is not an AI player"}), 400
    data = visualization_data(session.game_state, player.id, player.difficulty or 5, _ai_multiplier(), rng=_rng())
    return jsonify(data)


@api.route("/api/games/<game_id>/undo", methods=["POST"])
def undo(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    session.undo_last_throw()
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/next_turn", methods=["POST"])
def next_turn(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    session.next_turn()
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/continue_leg", methods=["POST"])
def continue_leg(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    session.continue_leg()
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/clear_bust", methods=["POST"])
def clear_bust(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    session.clear_bust()
    return jsonify(_state_payload(session))


@api.route("/api/games/<game_id>/end", methods=["POST"])
def end_game(game_id):
    session, error = _get_session(game_id)
    if error:
        return error
    logger.info("End game requested for game id=%s", game_id)
    history = build_history(session.game_state)
    payload = history.to_dict()
    try:
        record = GameRecord(
            id=history.id,
            game_type=history.game_type,
            winner_id=history.winner_id,
            started_at=history.started_at,
            completed_at=history.completed_at,
            payload=payload,
        )
        db.session.add(record)
        db.session.commit()
    except Exception as e:
        logger.exception("Failed to store history for game id=%s: %s", game_id, e)
        db.session.rollback()
        return jsonify({"error": "Failed to store game history", "details": str(e)}), 500

    # Only drop the game once its record is safely stored
    session.end_game()
    _sessions().pop(game_id, None)
    return jsonify(payload)


# Checkout helper
@api.route("/api/checkout", methods=["GET"])
def checkout_api():
    try:
        score = int(request.args.get("score", ""))
        darts = int(request.args.get("darts", 3))
        double = request.args.get("double")
        preferred = int(double) if double not in (None, "") else None
        path = compute_checkout(score, preferred, darts)
    except ValueError as e:
        return jsonify({"error": str(e) or "score must be an integer"}), 400
    return jsonify(path.to_dict())


@api.route("/api/checkout/doubles", methods=["GET"])
def checkout_doubles_api():
    try:
        score = int(request.args.get("score", ""))
        darts = int(request.args.get("darts", 3))
        doubles = valid_checkout_doubles(score, darts)
    except ValueError as e:
        return jsonify({"error": str(e) or "score must be an integer"}), 400
    return jsonify({"score": score, "darts": darts, "doubles": doubles})


# History
@api.route("/api/history", methods=["GET"])
def history():
    records = GameRecord.query.order_by(GameRecord.created_at.desc()).all()
    return jsonify([r.summary() for r in records])


@api.route("/api/history/<game_id>", methods=["GET"])
def history_detail(game_id):
    record = db.session.get(GameRecord, game_id)
    if record is None:
        return jsonify({"error": "Game not found"}), 404
    return jsonify(record.payload)


if __name__ == "__main__":
    create_app().run(debug=True)
