"""Interfaces (application boundary) for SNAPKEEP.

Defines framework-free contracts shared by the service layer and adapters:
the snapshot store ABC, the text transform ABC and the execution mode.

Dependency rule: may import `snapkeep.domain` only. It may be imported by
`snapkeep.service_layer`, `snapkeep.adapters`, and `snapkeep.bootstrap`.
"""
