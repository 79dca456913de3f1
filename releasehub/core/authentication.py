from rest_framework_simplejwt.authentication import JWTAuthentication


class QueryParamJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that also accepts ``?token=<access token>``.

    Used on PDF endpoints opened directly in a browser tab, where no
    Authorization header can be set. The header still wins when present.
    """

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is not None:
            return result

        raw_token = request.query_params.get('token')
        if not raw_token:
            return None
        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
