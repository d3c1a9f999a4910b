from tenantkit.app.error_mapper import ErrorDescriptor


class ClientError(Exception):
    def __init__(self, descriptor: ErrorDescriptor):
        self.descriptor = descriptor
        self.status_code = descriptor.status
        super().__init__(descriptor.message)


class ServerError(Exception):
    def __init__(self, descriptor: ErrorDescriptor):
        self.descriptor = descriptor
        self.status_code = descriptor.status
        super().__init__(descriptor.message)
