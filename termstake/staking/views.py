from termstake.base.api import public_api
from termstake.base.parsers import parse_choices, parse_decimal, parse_int, parse_str
from termstake.base.serializers import serialize
from termstake.staking.helpers import translate_staking_errors
from termstake.staking.models import Staking
from termstake.staking.service import lifecycle, rates, stats


@public_api('GET', 'POST')
@translate_staking_errors
def stakings_view(request):
    """GET, POST /api/staking/"""
    if request.method == 'POST':
        staking = lifecycle.create_staking(
            wallet_address=parse_str(request.g('walletAddress'), required=True),
            staked_amount=parse_decimal(request.g('stakedAmount'), required=True),
            staking_period=parse_int(request.g('stakingPeriod'), required=True),
            transaction_hash=parse_str(request.g('transactionHash')) or None,
        )
        return {'data': staking}
    page = parse_int(request.g('page'), minimum=1) or 1
    limit = parse_int(request.g('limit'), minimum=1, maximum=lifecycle.MAX_PAGE_SIZE) or 50
    status = parse_choices(Staking.STATUS, request.g('status'))
    return {'data': lifecycle.list_stakings(page=page, limit=limit, status=status)}


@public_api('GET')
@translate_staking_errors
def wallet_stakings_view(request, wallet_address):
    """GET /api/staking/wallet/<address>/"""
    return {'data': lifecycle.list_stakings_by_wallet(wallet_address)}


@public_api('GET')
@translate_staking_errors
def staking_detail_view(request, staking_id):
    """GET /api/staking/<id>/"""
    staking = lifecycle.get_staking(staking_id)
    return {'data': serialize(staking, opts={'level': 2})}


@public_api('POST')
@translate_staking_errors
def cancel_staking_view(request, staking_id):
    """POST /api/staking/<id>/cancel/"""
    wallet_address = parse_str(request.g('walletAddress'), required=True)
    result = lifecycle.cancel_staking(staking_id, wallet_address)
    return {'message': 'Staking cancelled, the principal was returned', 'data': result}


@public_api('GET')
@translate_staking_errors
def staking_stats_view(request):
    """GET /api/staking/stats/"""
    wallet_address = parse_str(request.g('walletAddress'))
    if wallet_address:
        lifecycle.validate_wallet_address(wallet_address)
    return {'data': stats.get_staking_stats(wallet_address or None)}


@public_api('GET', 'PUT')
@translate_staking_errors
def interest_rates_view(request):
    """GET, PUT /api/staking/interest-rates/"""
    if request.method == 'PUT':
        rates.authenticate_admin(parse_str(request.g('password'), required=True))
        updated = rates.replace_all_rates(request.g('rates'))
        return {'message': 'Interest rates updated', 'data': updated}
    return {'data': rates.get_all_rates(), 'stats': rates.get_rate_stats()}


@public_api('POST')
@translate_staking_errors
def process_expired_view(request):
    """POST /api/staking/process-expired/"""
    rates.authenticate_admin(parse_str(request.g('password'), required=True))
    return {'data': lifecycle.sweep_expired()}


@public_api('POST')
@translate_staking_errors
def admin_login_view(request):
    """POST /api/auth/login/"""
    rates.authenticate_admin(parse_str(request.g('password'), required=True))
    return {'data': {'authenticated': True}}


@public_api('POST')
@translate_staking_errors
def admin_change_password_view(request):
    """POST /api/auth/change-password/"""
    rates.change_admin_password(
        parse_str(request.g('currentPassword'), required=True),
        parse_str(request.g('newPassword'), required=True),
    )
    return {'message': 'Admin password changed'}


@public_api('GET')
@translate_staking_errors
def admin_status_view(request):
    """GET /api/auth/status/"""
    return {'data': rates.get_admin_status()}


@public_api('GET')
@translate_staking_errors
def user_stats_view(request, wallet_address):
    """GET /api/stats/user/<address>/"""
    wallet_address = lifecycle.validate_wallet_address(wallet_address)
    return {'data': stats.get_user_stats(wallet_address)}
