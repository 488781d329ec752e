#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Digests identifying the images in boot image listings."""

from cryptography.hazmat.primitives import hashes

from amlfip.exceptions import AMLFIPValueError

HASH_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def get_hash(data: bytes, algorithm: str = "sha256") -> bytes:
    """Compute digest of data.

    :param data: Input data.
    :param algorithm: Name of the algorithm, one of :data:`HASH_ALGORITHMS`.
    :raises AMLFIPValueError: Unknown algorithm.
    :return: Digest.
    """
    try:
        algorithm_cls = HASH_ALGORITHMS[algorithm.lower()]
    except KeyError as exc:
        raise AMLFIPValueError(f"Unsupported hash algorithm: {algorithm}") from exc
    digest = hashes.Hash(algorithm_cls())
    digest.update(data)
    return digest.finalize()
