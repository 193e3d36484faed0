import io

from flask import Blueprint, current_app, g, jsonify, request, send_file

from .auth import client_ip, require_role
from .errors import (AlreadyConsumed, NotConfirmed, NotEntitled, NotFound,
                     OutsideIssuanceWindow, ValidationError)
from .logging_config import get_logger
from .services import guest_store, redemption_guard, services
from .services.qr import render_token_png
from .services.sessions import Role
from .services.window import ISSUANCE_WINDOW_MESSAGE, is_issuance_allowed

bp = Blueprint('api', __name__)
logger = get_logger(__name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None and not request.get_data():
        return {}
    if not isinstance(data, dict):
        raise ValidationError()
    return data


@bp.post('/issue-qr')
def issue_qr():
    svc = services()
    cfg = current_app.config
    svc.rate_limiter.enforce(
        client_ip(), 'issue-qr',
        cfg['ISSUE_RATE_LIMIT_WINDOW_SECONDS'] * 1000, cfg['ISSUE_RATE_LIMIT_MAX_REQUESTS'],
    )

    now_ms = svc.clock.now_ms()
    if not is_issuance_allowed(now_ms, svc.clock):
        raise OutsideIssuanceWindow(ISSUANCE_WINDOW_MESSAGE)

    guest_id = str(_json_body().get('guestId') or '').strip()
    if not guest_id:
        raise ValidationError('guestId is required.')

    guest = guest_store().get(guest_id)
    if guest is None:
        raise NotFound()
    if not guest.has_breakfast:
        raise NotEntitled()
    if guest.used_on(svc.clock.today(now_ms)):
        raise AlreadyConsumed()

    token = svc.qr_tokens.issue(guest.guest_id, now_ms)
    logger.info('qr.issued', guest_id=guest.guest_id)

    if 'image/png' in request.headers.get('Accept', ''):
        return send_file(
            io.BytesIO(render_token_png(token)), mimetype='image/png', as_attachment=False,
            download_name=f'breakfast_{guest.guest_id}.png', etag=False, max_age=0,
        )
    return jsonify({'ok': True, 'token': token, 'expires_at': svc.qr_tokens.expires_at(now_ms)})


@bp.post('/consume')
@require_role(Role.VALIDATOR)
def consume():
    svc = services()
    body = _json_body()
    token = str(body.get('token') or '').strip()
    if not token:
        raise ValidationError('token is required.')
    if body.get('confirm') is not True:
        raise NotConfirmed()

    # TokenExpired / InvalidToken propagate to the error handler
    payload = svc.qr_tokens.verify(token, svc.clock.now_ms())
    result = redemption_guard().redeem(
        payload.guest_id, body.get('confirm'), actor=g.staff_session.role.value,
    )
    if not result.ok:
        raise result.error()
    return jsonify({
        'ok': True,
        'success': True,
        'data': result.guest.to_dict(svc.clock.today()),
    })


@bp.get('/guests')
def guests_by_room():
    room = request.args.get('room', '').strip()
    if not room:
        raise ValidationError('room is required.')
    today = services().clock.today()
    return jsonify({'ok': True, 'data': [guest.to_public_dict(today) for guest in guest_store().list_by_room(room)]})


@bp.get('/guests/<guest_id>')
@require_role(Role.RECEPTION, Role.RESTAURANT, Role.VALIDATOR)
def guest_detail(guest_id):
    guest = guest_store().get(guest_id.strip())
    if guest is None:
        raise NotFound()
    return jsonify({'ok': True, 'data': guest.to_dict(services().clock.today())})
