"""Process-wide default container.

The module-level functions are bound to `default_container`, for applications
that register everything once at startup and resolve from anywhere:

  from scopebind import inject, service

  @service()
  class AddService: ...

  inject(AddService)

Tests that touch the default container should call `reset()` between cases.
"""

from ._container import Container


default_container = Container()

register_self = default_container.register_self
register_for = default_container.register_for
register_instance = default_container.register_instance
service = default_container.service
service_for = default_container.service_for
inject = default_container.inject
replace_with = default_container.replace_with
destroy = default_container.destroy
reset = default_container.reset
