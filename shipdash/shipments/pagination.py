"""
Limit/offset paging shared by every transaction query endpoint.
"""

from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response


class TransactionPagination(LimitOffsetPagination):
    default_limit = 50
    max_limit = 1000

    def get_paginated_response(self, data):
        return Response({
            'data': data,
            'totalCount': self.count,
            'hasMore': self.offset + len(data) < self.count,
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'data': schema,
                'totalCount': {'type': 'integer'},
                'hasMore': {'type': 'boolean'},
            },
        }
