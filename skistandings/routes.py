from dataclasses import asdict

from flask import Blueprint, abort, current_app, jsonify, redirect, render_template, request, url_for

from .formatting import ALL_PAGE_SIZE, paginate
from .scoring import compute_individual_results, compute_team_standings, get_divisions, get_settings
from .season import compute_season_standings, event_racers, search_athletes


bp = Blueprint('main', __name__)

GENDERS = ('M', 'F')
CLASS_FILTERS = ('Varsity', 'JV')


def _events():
    return current_app.config.get('EVENTS') or []


def _load_error_page():
    """Render the load error page if race data failed to load, else None."""
    message = current_app.config.get('LOAD_ERROR')
    if not message:
        return None
    return render_template(
        'error.html',
        title='Error',
        breadcrumbs=[('Error', None)],
        message=f'Failed to load race data. {message}',
    ), 503


def _gender_arg() -> str:
    gender = (request.args.get('gender') or 'M').upper()
    return gender if gender in GENDERS else 'M'


def _class_arg() -> str | None:
    value = (request.args.get('class') or '').strip()
    return value or None


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _page_size_arg() -> int:
    raw = request.args.get('page_size')
    if raw == 'all':
        return ALL_PAGE_SIZE
    default = current_app.config.get('PAGE_SIZE_DEFAULT', 100)
    size = _int_arg('page_size', default)
    return size if size > 0 else default


def _event_or_404(event_index: int):
    events = _events()
    if event_index < 0 or event_index >= len(events):
        abort(404)
    return events[event_index]


@bp.route('/health/data')
def health_data():
    events = _events()
    races = current_app.config.get('RACES') or []
    error = current_app.config.get('LOAD_ERROR')
    return jsonify({
        'status': 'error' if error else 'ok',
        'error': error,
        'events': len(events),
        'races': len(races),
        'racers': sum(len(r.racers) for r in races),
    }), (503 if error else 200)


@bp.route('/')
def index():
    return redirect(url_for('main.events'))


@bp.route('/events')
def events():
    error_page = _load_error_page()
    if error_page is not None:
        return error_page
    query = request.args.get('q') or ''
    return render_template(
        'events.html',
        title='Races',
        breadcrumbs=[('Races', None)],
        events=_events(),
        query=query,
        athletes=search_athletes(_events(), query) if query else None,
    )


@bp.route('/events/<int:event_index>')
def event_detail(event_index):
    error_page = _load_error_page()
    if error_page is not None:
        return error_page
    event = _event_or_404(event_index)
    gender = _gender_arg()
    race_class = _class_arg()
    team_filter = (request.args.get('team') or '').strip() or None

    racers = event_racers(event)
    results = compute_individual_results(racers, gender, race_class)
    # Team filter options come from the unfiltered results
    teams = sorted({r.racer.team for r in results if r.racer.team})
    if team_filter:
        results = [r for r in results if r.racer.team == team_filter]

    effective_class = race_class or get_settings().get('season_team_class') or 'Varsity'
    team_standings = compute_team_standings(racers, gender, effective_class)

    leader_time = next((r.racer.total_time for r in results if r.racer.is_finisher), None)
    breadcrumbs = [('Races', url_for('main.events')), (event.name or 'Unnamed Event', None)]
    return render_template(
        'event.html',
        title=event.name or 'Race Results',
        breadcrumbs=breadcrumbs,
        event=event,
        event_index=event_index,
        gender=gender,
        race_class=race_class,
        class_filters=CLASS_FILTERS,
        team_filter=team_filter,
        teams=teams,
        results=results,
        field_size=results[0].field_size if results else 0,
        leader_time=leader_time,
        effective_class=effective_class,
        team_standings=team_standings,
    )


@bp.route('/standings')
def standings():
    error_page = _load_error_page()
    if error_page is not None:
        return error_page
    gender = _gender_arg()
    race_class = _class_arg()
    page_size = _page_size_arg()

    table = compute_season_standings(_events(), gender, race_class)
    pager = paginate(table.individuals, _int_arg('page', 1), page_size)
    return render_template(
        'standings.html',
        title='Standings',
        breadcrumbs=[('Standings', None)],
        gender=gender,
        race_class=race_class,
        class_filters=CLASS_FILTERS,
        standings=table,
        pager=pager,
        page_sizes=get_settings().get('page_sizes') or [25, 50, 100, 200],
        show_all=page_size >= ALL_PAGE_SIZE,
    )


@bp.route('/api/events')
def api_events():
    return jsonify([
        {
            'index': idx,
            'date': e.date,
            'name': e.name,
            'location': e.location,
            'discipline': e.discipline,
            'disciplines': e.disciplines,
            'racers': e.racer_count,
            'race_files': [r.filename for r in e.races],
        }
        for idx, e in enumerate(_events())
    ])


@bp.route('/api/standings')
def api_standings():
    gender = _gender_arg()
    race_class = _class_arg()
    table = compute_season_standings(_events(), gender, race_class)
    payload = asdict(table)
    payload['gender'] = gender
    payload['class'] = race_class
    payload['divisions'] = [asdict(d) for d in get_divisions()]
    return jsonify(payload)


@bp.route('/api/athletes')
def api_athletes():
    query = request.args.get('q') or ''
    limit = _int_arg('limit', 10)
    return jsonify([asdict(a) for a in search_athletes(_events(), query, limit=limit)])
