from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from peerline.bootstrap.config.loader import get_configfile


class SessionSettings(BaseModel):
    mode: Annotated[
        Literal["line", "stream"],
        Field(
            description=(
                "Granularity of the local input.\n"
                "'line' sends one newline-terminated message per Enter key and prints\n"
                "every complete message received. 'stream' sends each key as it is\n"
                "pressed and prints received bytes as they arrive, without framing."
            ),
            default="line"
        )
    ]

    read_chunk_size: Annotated[
        int,
        Field(
            description="Maximum number of bytes read from the socket at once.",
            default=4096,
            gt=0
        )
    ]

    max_pending_size: Annotated[
        int,
        Field(
            description=(
                "Maximum number of received bytes buffered while waiting for a newline.\n"
                "The session ends with an error if the peer exceeds it. 0 disables the limit."
            ),
            default=1 * 1024 * 1024,
            ge=0
        )
    ]

    echo: Annotated[
        bool,
        Field(
            description="Echo typed keys locally in 'stream' mode.",
            default=True
        )
    ]


class ListenerSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Bind address used by 'listen'.",
            default="0.0.0.0"
        )
    ]

    backlog: Annotated[
        int,
        Field(
            description="Maximum number of pending TCP connections.",
            default=1,
            ge=0
        )
    ]

    reuse_address: Annotated[
        bool,
        Field(
            description="Allow an immediate restart on the same port (SO_REUSEADDR).",
            default=True
        )
    ]


class ConnectorSettings(BaseModel):
    timeout: Annotated[
        float | None,
        Field(
            description="Seconds allowed to establish the outgoing connection.",
            default=None,
            gt=0
        )
    ]

    resolve_names: Annotated[
        bool,
        Field(
            description=(
                "Resolve host names used by 'connect'.\n"
                "When disabled only numeric IPv4 addresses are accepted."
            ),
            default=True
        )
    ]


class OutputSettings(BaseModel):
    peer_prefix: Annotated[
        str,
        Field(
            description="Text printed in front of every received message in 'line' mode.",
            default="[peer] "
        )
    ]

    encoding: Annotated[
        str,
        Field(
            description="Encoding of the prefix and notices written to the console.",
            default="utf-8"
        )
    ]


class PeerlineConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PEERLINE_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    session: Annotated[
        SessionSettings,
        Field(
            description="Duplex session behaviour and receive limits.",
            default_factory=SessionSettings
        )
    ]

    listener: Annotated[
        ListenerSettings,
        Field(
            description="How 'listen' binds and accepts its single peer.",
            default_factory=ListenerSettings
        )
    ]

    connector: Annotated[
        ConnectorSettings,
        Field(
            description="How 'connect' resolves and dials the peer.",
            default_factory=ConnectorSettings
        )
    ]

    output: Annotated[
        OutputSettings,
        Field(
            description="Console rendering.",
            default_factory=OutputSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        configfile = get_configfile()
        if configfile is None:
            return init_settings, env_settings

        return init_settings, env_settings, YamlConfigSettingsSource(settings_cls, yaml_file=configfile)
