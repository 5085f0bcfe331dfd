from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class SignInResponse(BaseModel):
    """Token and identity returned after the GitHub OAuth callback."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    username: str
    redirect_url: str
