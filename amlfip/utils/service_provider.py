#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Services with interchangeable providers selected by a configuration string.

A service is an abstract subclass of :class:`ServiceProvider`. Each concrete subclass is a
provider with a unique ``identifier``. A configuration string ``type=<identifier>;key=value``
selects the provider and passes the remaining keys to its constructor as strings.
"""

import abc
import inspect
import logging
from typing import Optional, Type, Union

from typing_extensions import Self

from amlfip.exceptions import AMLFIPError, AMLFIPKeyError, AMLFIPValueError
from amlfip.utils.plugins import get_plugins_manager

logger = logging.getLogger(__name__)


class ServiceProvider(abc.ABC):
    """Base of services with providers created from configuration.

    :cvar identifier: Provider name used as ``type`` in the configuration.
    :cvar plugin_group: Entry point group of plugins adding providers of the service.
    """

    identifier: str
    plugin_group: Optional[str] = None

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if not inspect.isabstract(cls) and not hasattr(cls, "identifier"):
            raise AMLFIPError(f"Provider {cls.__name__} does not define 'identifier'")

    def info(self) -> str:
        """Get printable description of the provider."""
        return self.__class__.__name__

    @classmethod
    def get_all_providers(cls) -> list[Type[Self]]:
        """Get concrete providers of the service, including those of subservices."""
        providers = []
        pending = list(cls.__subclasses__())
        while pending:
            klass = pending.pop(0)
            pending.extend(klass.__subclasses__())
            if not inspect.isabstract(klass):
                providers.append(klass)
        return providers

    @classmethod
    def get_types(cls) -> list[str]:
        """Get identifiers of all providers."""
        return [klass.identifier for klass in cls.get_all_providers()]

    @classmethod
    def get_provider(cls, identifier: str) -> Type[Self]:
        """Get provider class by identifier.

        :param identifier: Provider identifier.
        :raises AMLFIPValueError: Unknown identifier.
        :return: Provider class.
        """
        for klass in cls.get_all_providers():
            if klass.identifier == identifier:
                return klass
        raise AMLFIPValueError(f"{cls.__name__} has no provider '{identifier}'")

    @staticmethod
    def convert_params(params: str) -> dict[str, str]:
        """Split configuration string into parameters.

        :param params: String like ``type=tool;command=enc {input} {output}``.
        :raises AMLFIPValueError: An item is not in the ``key=value`` form.
        :raises AMLFIPKeyError: A key is repeated.
        :return: Parameters, values may contain further ``=`` characters.
        """
        result: dict[str, str] = {}
        for item in params.split(";"):
            key, sep, value = item.partition("=")
            if not sep or not key:
                raise AMLFIPValueError(
                    f"Invalid parameter '{item}', expected 'key=value' items separated by ';'"
                )
            if key in result:
                raise AMLFIPKeyError(f"Duplicate parameter '{key}'")
            result[key] = value
        return result

    @classmethod
    def create(cls, params: Union[str, dict[str, str]]) -> Optional[Self]:
        """Create provider described by configuration.

        Plugins of the service are loaded first.

        :param params: Configuration string or parameters, ``type`` selects the provider.
        :raises AMLFIPKeyError: The ``type`` parameter is missing.
        :raises AMLFIPValueError: The provider does not accept the parameters.
        :return: Provider instance, None for an unknown ``type``.
        """
        cls.load_plugins()
        kwargs = cls.convert_params(params) if isinstance(params, str) else dict(params)
        if "type" not in kwargs:
            raise AMLFIPKeyError(f"{cls.__name__} configuration is missing the 'type' parameter")
        identifier = kwargs.pop("type")
        for klass in cls.get_all_providers():
            if klass.identifier != identifier:
                continue
            try:
                inspect.signature(klass).bind(**kwargs)
            except TypeError as exc:
                raise AMLFIPValueError(
                    f"Invalid parameters of {cls.__name__} '{identifier}': {exc}"
                ) from exc
            return klass(**kwargs)
        logger.info(f"{cls.__name__} '{identifier}' not found among {cls.get_types()}")
        return None

    @classmethod
    def load_plugins(cls) -> None:
        """Import the plugins adding providers of this service."""
        if cls.plugin_group:
            logger.debug(f"Loading plugins of group {cls.plugin_group}")
            get_plugins_manager().load_from_entrypoints(cls.plugin_group)
