"""Igniter: bootstrap configuration assembly.

Igniter resolves a graph of typed assets (install configuration, certificates,
kubeconfigs, manifests, systemd units, files) into a single Ignition config
consumed by a machine provisioning mechanism. Each asset declares the asset
types it depends on and is either loaded from a previous run's output
directory or generated once from its resolved dependencies.

Basic Usage:
    >>> from igniter.builders import make_bootstrap
    >>>
    >>> parents = make_bootstrap("./cluster")
    >>> bootstrap = parents[Bootstrap]
    >>> bootstrap.config.passwd.users[0].name
    'core'

The package consists of several core modules:
    - asset: The asset contract and on-disk file model
    - registry: Asset registration and introspection
    - graph: Static dependency graph validation and build plans
    - store: Memoized, dependency-ordered asset resolution
    - templates: Template rendering and template tree walking
    - ignition: The Ignition config model and its serialization
    - bootstrap: The terminal asset composing the bootstrap Ignition config
    - destroy: Platform destroyer registry and dispatch
    - errors: Framework-specific exceptions
"""
