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
.. module:: jenkinsrest.users
    :platform: Unix, Windows
    :synopsis: Users of the built-in security realm and API tokens
'''

import logging

from jenkinsrest import endpoints
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.exceptions import ProtocolException
from jenkinsrest.pollable import Pollable

logger = logging.getLogger(__name__)


class User(Pollable):

    kind = 'user'

    def __init__(self, jenkins, name, full_name=None, email=None, raw=None):
        base = endpoints.USER % {'name': endpoints.quote_segment(name)}
        super(User, self).__init__(jenkins, base, raw)
        self.name = name
        self.full_name = full_name
        self.email = email

    def get_id(self):
        return self._get('id', self.name)

    def get_full_name(self):
        return self._get('fullName', self.full_name)

    def get_description(self):
        return self._get('description', '')

    def delete(self, scope=None):
        return delete_user(self.jenkins, self.name, scope=scope)


class APIToken(object):
    '''An API token of the authenticated user.

    The value is only known right after generation; the server keeps a
    hash of it.
    '''

    def __init__(self, jenkins, name, uuid, value=None):
        self.jenkins = jenkins
        self.name = name
        self.uuid = uuid
        self.value = value

    def __repr__(self):
        return '<APIToken %s %s>' % (self.name, self.uuid)

    def revoke(self, scope=None):
        return revoke_api_token(self.jenkins, self.uuid, scope=scope)


def create_user(jenkins, name, password, full_name, email, scope=None):
    '''Create an account in the built-in security realm.

    :returns: the unpolled :class:`User`
    '''
    form = {
        'username': name,
        'password1': password,
        'password2': password,
        'fullname': full_name,
        'email': email,
    }
    jenkins.requester.post_form(endpoints.CREATE_USER, form, scope=scope)
    return User(jenkins, name, full_name, email)


def delete_user(jenkins, name, scope=None):
    endpoint = endpoints.DELETE_USER % {'name': endpoints.quote_segment(name)}
    try:
        response, _ = jenkins.requester.post_form(endpoint, {'Submit': 'Yes'},
                                                  scope=scope)
    except BadHTTPException as e:
        if e.status == 404:
            raise NotFoundException('user[%s] does not exist' % name,
                                    e.status, e.body)
        raise
    return 200 <= response.status_code < 300


def get_all_users(jenkins, scope=None):
    '''Return the polled users of the security realm, ``[User]``.'''
    _, data = jenkins.requester.get_json(endpoints.ALL_USERS,
                                         query={'depth': 1}, scope=scope)
    users = []
    for entry in data.get('users', []):
        # older servers wrap each entry in a "user" object
        raw = entry.get('user', entry)
        users.append(User(jenkins, raw['id'], raw.get('fullName'), raw=raw))
    return users


def generate_api_token(jenkins, name, scope=None):
    '''Generate an API token for the authenticated user.

    :param name: token name, ``str``
    :returns: :class:`APIToken` carrying the token value
    '''
    _, data = jenkins.requester.post_form(endpoints.GENERATE_API_TOKEN,
                                          {'newTokenName': name}, scope=scope)
    if not data or data.get('status') != 'ok':
        raise ProtocolException('Could not generate API token %s: %r'
                                % (name, data))
    token = data['data']
    logger.debug('Generated API token %s', token['tokenUuid'])
    return APIToken(jenkins, token['tokenName'], token['tokenUuid'],
                    token['tokenValue'])


def revoke_api_token(jenkins, uuid, scope=None):
    response, _ = jenkins.requester.post_form(endpoints.REVOKE_API_TOKEN,
                                              {'tokenUuid': uuid},
                                              scope=scope)
    return 200 <= response.status_code < 300


def revoke_all_api_tokens(jenkins, scope=None):
    response, _ = jenkins.requester.post_form(endpoints.REVOKE_ALL_API_TOKENS,
                                              scope=scope)
    return 200 <= response.status_code < 300
