"""
DevCamper API — Services Layer
===============================

What:  Business logic between routes (HTTP) and the ORM (persistence).
How:   Stateless service objects receive the session and collaborators per
       call; routes stay thin.

Service Inventory:
    - advanced_results: query-string → filtered/sorted/paginated listing
    - bootcamp_service: bootcamp rules, radius search, photo upload
    - course_service / review_service: child resources + bootcamp averages
    - user_service / auth_service: accounts, credentials, reset flow
    - geocoder (+ circuit_breaker): MapQuest address lookup
    - file_service: photo validation, resizing and storage
"""
