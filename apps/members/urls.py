from django.urls import path
from . import views

app_name = 'members'

urlpatterns = [
    # Plan purchase: members and enrollment gate
    path('plan-purchases/<int:plan_purchase_id>/members/', views.plan_members, name='plan_members'),
    path('plan-purchases/<int:plan_purchase_id>/enrollment/', views.plan_enrollment, name='plan_enrollment'),

    # Member record
    path('members/<int:member_id>/', views.member_detail, name='member_detail'),
    path('members/<int:member_id>/draft/', views.member_draft, name='member_draft'),
    path('members/<int:member_id>/lock/', views.member_lock, name='member_lock'),
]
