import io
import json

from app.jobs.normalize.run_normalize import main


def test_normalizes_file(tmp_path, capsys):
    path = tmp_path / "board.json"
    path.write_text(json.dumps({"stationName": "Basel SBB", "departures": [{"time": "14:00"}]}))

    assert main(["--kind", "board", "--file", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"type": "departures", "station": "Basel SBB", "connections": [{"time": "14:00"}]}


def test_params_fill_missing_fields(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({"routes": []})))
    assert main(["--kind", "compare", "--param", "origin=Bern", "--param", "destination=Chur"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert (out["origin"], out["destination"]) == ("Bern", "Chur")


def test_trip_points(tmp_path, capsys):
    path = tmp_path / "trip.json"
    path.write_text(
        json.dumps(
            {
                "legs": [
                    {
                        "type": "ServiceLeg",
                        "serviceJourney": {},
                        "departure": {"lat": 46.948, "lon": 7.4474},
                        "arrival": {"lat": 47.3769, "lon": 8.5417},
                    }
                ]
            }
        )
    )
    assert main(["--kind", "trip", "--file", str(path), "--points"]) == 0
    assert json.loads(capsys.readouterr().out) == [[46.948, 7.4474], [47.3769, 8.5417]]


def test_invalid_payload_exit_code(tmp_path, capsys):
    path = tmp_path / "eco.json"
    path.write_text(json.dumps({"carCO2": 3}))
    assert main(["--kind", "eco", "--file", str(path)]) == 1
    assert "Invalid eco data" in capsys.readouterr().err
