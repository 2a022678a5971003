"""Development entry point: `python app.py` (or `flask --app app run`)."""

from src.community_events.community_events.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG")))
