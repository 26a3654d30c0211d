# SPDX-License-Identifier: Apache-2.0
"""Test doubles for jsonguard components."""
