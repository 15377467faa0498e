"""
DevCamper API — Routes Package
===============================

Route Inventory (prefix /api/v1 unless noted):
    - bootcamps.py: /bootcamps, /bootcamps/{id}, /bootcamps/{id}/photo,
                    /bootcamps/radius/{zipcode}/{distance}
    - courses.py:   /courses, /courses/{id}, /bootcamps/{bootcampId}/courses
    - reviews.py:   /reviews, /reviews/{id}, /bootcamps/{bootcampId}/reviews
    - auth.py:      /auth/register, /auth/login, /auth/logout, /auth/me, ...
    - users.py:     /users, /users/{id} (admin only)
    - uploads.py:   /uploads/{filename} (no prefix)
    - health.py:    /health (no prefix)

Routes are thin: read the request, call a service, wrap the result in the
response envelope. Business rules live in services.
"""
