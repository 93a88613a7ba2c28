# Task board core: reconciliation, state transitions, and feed-driven views
#
# Components:
#   schema.py     - Data model (Task, TaskStatus, DragPayload) and title rules
#   errors.py     - ValidationError, NotFoundError, TransportError
#   store.py      - Backing store contract + SQLite implementation
#   feed.py       - Change feed adapter (snapshots -> view + change events)
#   view.py       - Local view store (feed is the only writer)
#   intents.py    - Closed set of user intents (Create | Rename | Delete | Move)
#   gateway.py    - Mutation gateway: validates intents, issues store commands
#   resolver.py   - Drag-drop transition rules and explicit card actions
#   projector.py  - Column projection (todo / inprocess / complete)
#   board.py      - Composition root and UI event entry points
#   config.py     - YAML + environment configuration
#   server.py     - Flask JSON API
