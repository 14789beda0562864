import pytest


def new_game(client, rules=None, players=None):
    body = {
        "rules": rules or {"game_type": "501", "double_out": True},
        "players": players or [{"id": "a", "name": "Alice"}, {"id": "b", "name": "Bob"}],
    }
    resp = client.post("/api/new_game", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def throw(client, game_id, segment, **extra):
    return client.post(f"/api/games/{game_id}/throw", json={"segment": segment, **extra})


def test_index_and_health(client) -> None:
    assert "/api/new_game" in client.get("/").get_json()["endpoints"]
    assert client.get("/health").get_json() == {"status": "ok", "active_games": 0}


def test_new_game_and_state(client) -> None:
    state = new_game(client)
    assert state["current_player_id"] == "a"
    assert state["legs"][0]["scores"]["a"]["remaining"] == 501
    assert state["checkout"] is None

    fetched = client.get(f"/api/game_state/{state['id']}").get_json()
    assert fetched["id"] == state["id"]


def test_new_game_rejects_bad_input(client) -> None:
    resp = client.post("/api/new_game", json={"rules": {"game_type": "701"}, "players": [{"name": "A"}]})
    assert resp.status_code == 400
    assert "error" in resp.get_json()

    resp = client.post("/api/new_game", json={"rules": {"best_of": 2}, "players": [{"name": "A"}]})
    assert resp.status_code == 400

    resp = client.post("/api/new_game", json={"players": []})
    assert resp.status_code == 400

    resp = client.post("/api/new_game", json={"players": [{"name": "Bot", "kind": "ai", "difficulty": 12}]})
    assert resp.status_code == 400


def test_unknown_game_is_404(client) -> None:
    assert client.get("/api/game_state/nope").status_code == 404
    assert client.post("/api/games/nope/throw", json={"segment": "T20"}).status_code == 404
    assert client.post("/api/games/nope/end").status_code == 404


def test_throws_turns_and_undo(client) -> None:
    game_id = new_game(client)["id"]
    throw(client, game_id, "T20")
    throw(client, game_id, {"number": 20, "ring": "triple"})
    state = throw(client, game_id, None, x=0.0, y=-101.0).get_json()
    assert state["legs"][0]["scores"]["a"]["remaining"] == 381
    assert state["legs"][0]["throws"][2]["coordinates"] == {"x": 0.0, "y": -101.0}
    assert state["current_throw_in_turn"] == 3

    state = client.post(f"/api/games/{game_id}/next_turn").get_json()
    assert state["current_player_id"] == "b"

    state = client.post(f"/api/games/{game_id}/undo").get_json()
    assert state["current_player_id"] == "a"
    assert state["current_throw_in_turn"] == 2

    resp = throw(client, game_id, "X9")
    assert resp.status_code == 400


def test_checkout_suggestion_in_state(client) -> None:
    game_id = new_game(client, rules={"game_type": "301"})["id"]
    for label in ("T20", "T20", "T20"):
        throw(client, game_id, label)
    # Turn is full: 121 has no one-dart finish
    assert client.get(f"/api/game_state/{game_id}").get_json()["checkout"] is None

    state = client.post(f"/api/games/{game_id}/next_turn").get_json()
    assert state["checkout"] is None  # b is still on 301
    for _ in range(3):
        throw(client, game_id, None)
    state = client.post(f"/api/games/{game_id}/next_turn").get_json()
    assert state["checkout"]["text"] == "T20 → T11 → D14"


def test_bust_flow(client) -> None:
    game_id = new_game(client, rules={"game_type": "301"})["id"]
    for label in ("T20", "T20", "T20"):
        throw(client, game_id, label)
    client.post(f"/api/games/{game_id}/next_turn")
    for _ in range(3):
        throw(client, game_id, None)
    client.post(f"/api/games/{game_id}/next_turn")

    throw(client, game_id, "T20")
    state = throw(client, game_id, "T20").get_json()
    assert state["bust"] == {"player_id": "a", "score_before_bust": 121}
    assert state["current_player_id"] == "b"

    state = client.post(f"/api/games/{game_id}/clear_bust").get_json()
    assert state["bust"] is None


def test_leg_win_continue_and_end(client) -> None:
    game_id = new_game(client, rules={"game_type": "301", "double_out": False, "best_of": 3})["id"]

    def win_leg():
        for turn in (("T20", "T20", "T20"), ("T20", "T20", "S1")):
            for label in turn:
                state = throw(client, game_id, label).get_json()
            if state["legs"][state["current_leg_index"]]["winner_id"]:
                return state
            client.post(f"/api/games/{game_id}/next_turn")
            for _ in range(3):
                throw(client, game_id, None)
            client.post(f"/api/games/{game_id}/next_turn")

    state = win_leg()
    assert state["leg_winner"]["winner_id"] == "a"
    assert state["legs_won"] == {"a": 1, "b": 0}

    state = client.post(f"/api/games/{game_id}/continue_leg").get_json()
    assert state["current_leg_index"] == 1
    assert state["leg_winner"] is None

    state = win_leg()
    assert state["match_winner_id"] == "a"

    history = client.post(f"/api/games/{game_id}/end").get_json()
    assert history["winner_id"] == "a"
    assert history["statistics"]["player_stats"]["a"]["checkout_successes"] == 2
    assert client.get(f"/api/game_state/{game_id}").status_code == 404

    listing = client.get("/api/history").get_json()
    assert [r["id"] for r in listing] == [game_id]
    assert listing[0]["players"] == ["Alice", "Bob"]

    detail = client.get(f"/api/history/{game_id}").get_json()
    assert detail["legs_won"] == {"a": 2, "b": 0}
    assert client.get("/api/history/unknown").status_code == 404


def test_ai_throw_and_target(client) -> None:
    players = [{"id": "bot", "name": "Bot", "kind": "ai", "difficulty": 8}, {"id": "a", "name": "Alice"}]
    state = new_game(client, players=players)
    game_id = state["id"]
    assert state["ai_players"]["bot"]["description"] == "Advanced"

    target = client.get(f"/api/games/{game_id}/ai_target").get_json()
    assert set(target) == {"target_x", "target_y", "accuracy_radius"}

    for _ in range(3):
        resp = client.post(f"/api/games/{game_id}/ai_throw")
        assert resp.status_code == 200
        assert resp.get_json()["throw"]["player_id"] == "bot"
    # Turn is full until next_turn is called
    assert client.post(f"/api/games/{game_id}/ai_throw").status_code == 400

    state = client.post(f"/api/games/{game_id}/next_turn").get_json()
    assert state["current_player_id"] == "a"
    assert client.post(f"/api/games/{game_id}/ai_throw").status_code == 400
    assert client.get(f"/api/games/{game_id}/ai_target").status_code == 400


def test_settings(client) -> None:
    defaults = client.get("/api/settings").get_json()
    assert defaults == {"ai_global_multiplier": 1.0, "show_ai_visualization": False}

    updated = client.post("/api/settings", json={"ai_global_multiplier": 5, "show_ai_visualization": True}).get_json()
    assert updated["ai_global_multiplier"] == 2.0
    assert updated["show_ai_visualization"] is True

    resp = client.post("/api/settings", json={"ai_global_multiplier": "fast"})
    assert resp.status_code == 400


def test_settings_multiplier_scales_ai_target(client) -> None:
    players = [{"id": "bot", "name": "Bot", "kind": "ai", "difficulty": 10}]
    game_id = new_game(client, players=players)["id"]
    before = client.get(f"/api/games/{game_id}/ai_target").get_json()["accuracy_radius"]
    client.post("/api/settings", json={"ai_global_multiplier": 0.5})
    after = client.get(f"/api/games/{game_id}/ai_target").get_json()["accuracy_radius"]
    assert after == pytest.approx(before / 2)


def test_checkout_routes(client) -> None:
    data = client.get("/api/checkout?score=170").get_json()
    assert [d["label"] for d in data["darts"]] == ["T20", "T20", "Bull (50)"]
    assert data["text"] == "T20 → T20 → Bull"

    data = client.get("/api/checkout?score=100&darts=3&double=16").get_json()
    assert data["darts"][-1]["label"] == "D16"

    assert client.get("/api/checkout?score=171").status_code == 400
    assert client.get("/api/checkout?score=abc").status_code == 400
    assert client.get("/api/checkout").status_code == 400

    doubles = client.get("/api/checkout/doubles?score=40&darts=1").get_json()
    assert doubles["doubles"] == [20]
    assert client.get("/api/checkout/doubles?score=40&darts=5").status_code == 400


def test_failed_history_save_keeps_the_game(client, monkeypatch) -> None:
    from app import db

    game_id = new_game(client)["id"]
    throw(client, game_id, "T20")

    def fail_commit():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(db.session, "commit", fail_commit)
    resp = client.post(f"/api/games/{game_id}/end")
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to store game history"

    state = client.get(f"/api/game_state/{game_id}").get_json()
    assert state["legs"][0]["scores"]["a"]["remaining"] == 441

    monkeypatch.undo()
    assert client.post(f"/api/games/{game_id}/end").status_code == 200
    assert [r["id"] for r in client.get("/api/history").get_json()] == [game_id]


def test_oldest_game_dropped_beyond_limit(client) -> None:
    client.application.config["MAX_ACTIVE_GAMES"] = 2
    first, second, third = (new_game(client)["id"] for _ in range(3))
    assert client.get(f"/api/game_state/{first}").status_code == 404
    assert client.get(f"/api/game_state/{second}").status_code == 200
    assert client.get(f"/api/game_state/{third}").status_code == 200
    assert client.get("/health").get_json()["active_games"] == 2
