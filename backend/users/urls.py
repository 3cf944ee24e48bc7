from django.urls import path
from .views import CurrentUserView, LoginView, RefreshView, SignupView, VerifyOtpView

app_name = "users"

urlpatterns = [
    path("login", LoginView.as_view(), name="login"),
    path("signup", SignupView.as_view(), name="signup"),
    path("verify-otp", VerifyOtpView.as_view(), name="verify-otp"),
    path("refresh", RefreshView.as_view(), name="token-refresh"),
    path("me", CurrentUserView.as_view(), name="me"),
]
