from django.urls import path

from termstake.staking import views

app_name = 'staking'

urlpatterns = [
    path('staking/', views.stakings_view, name='stakings'),
    path('staking/stats/', views.staking_stats_view, name='stats'),
    path('staking/interest-rates/', views.interest_rates_view, name='interest_rates'),
    path('staking/process-expired/', views.process_expired_view, name='process_expired'),
    path('staking/wallet/<str:wallet_address>/', views.wallet_stakings_view, name='wallet_stakings'),
    path('staking/<int:staking_id>/', views.staking_detail_view, name='detail'),
    path('staking/<int:staking_id>/cancel/', views.cancel_staking_view, name='cancel'),
    path('auth/login/', views.admin_login_view, name='admin_login'),
    path('auth/change-password/', views.admin_change_password_view, name='admin_change_password'),
    path('auth/status/', views.admin_status_view, name='admin_status'),
    path('stats/user/<str:wallet_address>/', views.user_stats_view, name='user_stats'),
]
