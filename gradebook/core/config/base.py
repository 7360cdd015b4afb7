import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import SettingsConfigDict

from gradebook.model import BaseModel


# NOTE: BaseModel comes second so that its by_alias=True model_dump default
#       still applies
class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    # nested sections are settings classes too; keep them from reading
    # unrelated variables such as PATH or PORT out of the environment
    model_config = SettingsConfigDict(env_prefix="GRADEBOOK_")

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


class BaseSecrets(BaseSettings):  # pyright: ignore [reportIncompatibleVariableOverride]
    pass
