#!/usr/bin/env python
# Software License Agreement (BSD License)
#
# Copyright (c) 2010, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of Willow Garage, Inc. nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# 'AS IS' AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

'''
.. module:: jenkinsrest.exceptions
    :platform: Unix, Windows
    :synopsis: Exceptions raised by the Jenkins REST client

Every exception carries a ``kind`` discriminator so callers can branch on
the category of a failure without parsing messages or HTTP codes.
'''


class JenkinsException(Exception):
    '''General exception type for jenkins-API-related failures.

    :ivar kind: failure category, ``str``
    :ivar status: HTTP status code of the response, if any, ``int``
    :ivar body: decoded response body (JSON or text), if any
    '''

    kind = 'server'

    def __init__(self, message=None, status=None, body=None):
        super(JenkinsException, self).__init__(message)
        self.status = status
        self.body = body


class TransportException(JenkinsException):
    '''The request could not be sent or no response was received.'''
    kind = 'transport'


class TimeoutException(TransportException):
    '''A special exception to call out in the case of a socket timeout.'''


class CancelledException(JenkinsException):
    '''The caller's scope was cancelled or its deadline expired.'''
    kind = 'cancelled'


class AuthenticationException(JenkinsException):
    '''The server rejected the supplied credentials.'''
    kind = 'authentication'


class AuthorizationException(JenkinsException):
    '''The server refused the action for the authenticated user.'''
    kind = 'authorization'


class NotFoundException(JenkinsException):
    '''A special exception to call out the case of receiving a 404.'''
    kind = 'not-found'


class ConflictException(JenkinsException):
    '''The entity being created already exists.'''
    kind = 'conflict'


class BadHTTPException(JenkinsException):
    '''A special exception to call out the case of a broken HTTP response.'''
    kind = 'server'


class DecodeException(JenkinsException):
    '''A successful response carried a body that could not be parsed.'''
    kind = 'decode'


class XMLCodecException(DecodeException):
    '''A configuration document could not be encoded or decoded.'''


class ProtocolException(JenkinsException):
    '''A successful response was missing something the protocol requires.'''
    kind = 'protocol'


class EmptyResponseException(ProtocolException):
    '''A special exception to call out the case receiving an empty response.'''
