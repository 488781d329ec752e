#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""AMLFIP command line applications."""
