"""Plugins referenced by ``module:attribute`` strings in the plugin loader tests."""

from __future__ import annotations

from docsite.plugins import define_plugin

banner = define_plugin("banner", transform_markdown=lambda content, path: content + "\n\nBanner\n")


class RetitlePlugin:
    name = "retitle"

    def config(self, config):
        config.title = "Retitled"
        return config


def make_plugin():
    return define_plugin("from-factory")


not_a_plugin = 42
