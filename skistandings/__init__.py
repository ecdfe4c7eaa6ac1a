import os
from pathlib import Path
from flask import Flask


def _env_int(name, default):
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def create_app(data_dir=None, settings=None):
    app = Flask(__name__)

    from . import scoring
    from . import formatting
    from .datastore import load_season

    data_dir = Path(data_dir or os.environ.get("SKI_DATA_DIR") or scoring.DATA_DIR)
    app.config["DATA_DIR"] = data_dir
    app.config["PAGE_SIZE_DEFAULT"] = _env_int("PAGE_SIZE_DEFAULT", 100)

    # Scoring rules come from the data directory unless given explicitly
    if settings is None:
        settings = scoring.load_settings(data_dir / "settings.json")
    scoring.apply_settings(settings)

    app.config["EVENTS"] = []
    app.config["RACES"] = []
    app.config["LOAD_ERROR"] = None
    app.logger.info("Loading race data from %s", data_dir)
    try:
        season = load_season(data_dir)
        app.config["EVENTS"] = season["events"]
        app.config["RACES"] = season["races"]
    except Exception as exc:  # pylint: disable=broad-except
        app.logger.exception("Failed to load race data; continuing with an empty season")
        app.config["LOAD_ERROR"] = str(exc)

    app.jinja_env.filters["format_time"] = formatting.format_time
    app.jinja_env.filters["format_time_behind"] = formatting.format_time_behind
    app.jinja_env.filters["format_date"] = formatting.format_date
    app.jinja_env.filters["gender_label"] = formatting.gender_label

    from . import routes  # type: ignore
    app.register_blueprint(routes.bp)

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    create_app().run(host='0.0.0.0', port=port)
