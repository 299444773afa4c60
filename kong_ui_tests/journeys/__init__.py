"""
Journey-based tests against a live Kong Manager.

Journeys build on each other: the Service created in journey 01's first
scenario is the parent of the Route created in its second. Run them with
`python -m kong_ui_tests`, which applies the run configuration (reruns,
workers, HTML report) before handing over to pytest.

Journey Order:
    01 - Gateway resources (Service, then a Route bound to it)
"""
