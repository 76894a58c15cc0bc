from django.urls import path
from . import views

app_name = 'ecards'

urlpatterns = [
    # Issuance
    path('members/<int:member_id>/ecard/', views.request_member_card, name='request_member_card'),
    path('ecards/generate/', views.generate_card, name='generate_card'),

    # Cards
    path('ecards/<int:card_id>/', views.card_detail, name='card_detail'),
    path('ecards/<int:card_id>/confirm/', views.confirm_card, name='confirm_card'),

    # Per plan purchase
    path('plan-purchases/<int:plan_purchase_id>/ecards/', views.plan_cards, name='plan_cards'),
    path(
        'plan-purchases/<int:plan_purchase_id>/ecards/available-members/',
        views.available_members,
        name='available_members'
    ),
]
