"""Tests for Gateway / WatcherGateway translation with substituted transports."""

from __future__ import annotations

import pytest

from clean_framework.core.errors import (
    ConfigError,
    DuplicateSubscriptionError,
    MissingTransportError,
    UnhandledFailureError,
)
from clean_framework.core.messages import (
    Entity,
    FailureInput,
    FailureResponse,
    Output,
    Request,
    SuccessInput,
    SuccessResponse,
)
from clean_framework.core.result import Left, Right
from clean_framework.providers.gateway import Gateway, WatcherGateway
from clean_framework.providers.use_case import UseCase


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class DocEntity(Entity):
    value: str = ""


class DocOutput(Output):
    id: str


class ReadDocRequest(Request):
    path: str
    id: str


class DocResponse(SuccessResponse):
    content: dict


class DocSuccessInput(SuccessInput):
    value: str


class DocUseCase(UseCase[DocEntity]):
    def __init__(self) -> None:
        super().__init__(
            entity=DocEntity(),
            input_filters={
                DocSuccessInput: lambda i, e: e.merge(value=i.value),
            },
        )

    async def load(self, doc_id: str) -> None:
        await self.request(
            DocOutput(id=doc_id),
            on_success=lambda s: self.entity.merge(value=s.value),
            on_failure=lambda f: self.entity.merge(value="failure"),
        )


class DocGateway(Gateway[DocOutput, ReadDocRequest, DocResponse, DocSuccessInput]):
    output_type = DocOutput

    def build_request(self, output: DocOutput) -> ReadDocRequest:
        return ReadDocRequest(path="docs", id=output.id)

    def on_success(self, response: DocResponse) -> DocSuccessInput:
        return DocSuccessInput(value=response.content["content"])

    def on_failure(self, failure: FailureResponse) -> FailureInput:
        return FailureInput(message="backend error")


class StrictDocGateway(DocGateway):
    """Leaves on_failure unhandled."""

    on_failure = Gateway.on_failure


class DocWatcherGateway(WatcherGateway[DocOutput, ReadDocRequest, DocResponse, DocSuccessInput]):
    output_type = DocOutput

    def build_request(self, output: DocOutput) -> ReadDocRequest:
        return ReadDocRequest(path="docs", id=output.id)

    def on_success(self, response: DocResponse) -> DocSuccessInput:
        return DocSuccessInput(value=response.content["content"])


# ===========================================================================
# Gateway
# ===========================================================================


class TestGateway:
    def test_build_request(self):
        gateway = DocGateway(use_case=DocUseCase())
        assert gateway.build_request(DocOutput(id="555")) == ReadDocRequest(path="docs", id="555")

    def test_subscribes_on_construction(self):
        use_case = DocUseCase()
        DocGateway(use_case=use_case)
        assert use_case.has_subscription(DocOutput)

    def test_second_gateway_for_same_output_rejected(self):
        use_case = DocUseCase()
        DocGateway(use_case=use_case)
        with pytest.raises(DuplicateSubscriptionError):
            DocGateway(use_case=use_case)

    def test_output_type_required(self):
        class NoTypeGateway(DocGateway):
            output_type = None  # type: ignore[assignment]

        with pytest.raises(ConfigError, match="output_type"):
            NoTypeGateway(use_case=DocUseCase())

    @pytest.mark.asyncio
    async def test_transport_success(self):
        use_case = DocUseCase()
        gateway = DocGateway(use_case=use_case)
        sent = []

        async def transport(request):
            sent.append(request)
            return Right(DocResponse(content={"content": "success"}))

        gateway.transport = transport
        await use_case.load("123")

        assert sent == [ReadDocRequest(path="docs", id="123")]
        assert use_case.entity == DocEntity(value="success")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        use_case = DocUseCase()
        gateway = DocGateway(use_case=use_case)

        async def transport(request):
            return Left(FailureResponse())

        gateway.transport = transport
        await use_case.load("123")

        assert use_case.entity == DocEntity(value="failure")

    @pytest.mark.asyncio
    async def test_transport_via_constructor(self):
        use_case = DocUseCase()

        async def transport(request):
            return Right(DocResponse(content={"content": request.id}))

        DocGateway(use_case=use_case, transport=transport)
        await use_case.load("abc")

        assert use_case.entity.value == "abc"

    @pytest.mark.asyncio
    async def test_unhandled_failure_is_fatal(self):
        use_case = DocUseCase()
        gateway = StrictDocGateway(use_case=use_case)

        async def transport(request):
            return Left(FailureResponse(message="503"))

        gateway.transport = transport
        with pytest.raises(UnhandledFailureError, match="503"):
            await use_case.load("1")

    @pytest.mark.asyncio
    async def test_unattached_gateway_raises(self):
        use_case = DocUseCase()
        DocGateway(use_case=use_case)

        with pytest.raises(MissingTransportError, match="DocOutput"):
            await use_case.load("1")


# ===========================================================================
# WatcherGateway
# ===========================================================================


class TestWatcherGateway:
    @pytest.mark.asyncio
    async def test_default_failure_is_recovered(self):
        use_case = DocUseCase()
        gateway = DocWatcherGateway(use_case=use_case)

        async def transport(request):
            return Left(FailureResponse(message="permission denied"))

        gateway.transport = transport
        await use_case.load("1")

        assert use_case.entity.value == "failure"

    def test_default_failure_message(self):
        gateway = DocWatcherGateway(use_case=DocUseCase())
        failure = gateway.on_failure(FailureResponse(message="offline"))
        assert failure == FailureInput(message="Subscription could not be established: offline")

    def test_yield_response_applies_input(self):
        use_case = DocUseCase()
        gateway = DocWatcherGateway(use_case=use_case)

        gateway.yield_response(DocResponse(content={"content": "v1"}))
        assert use_case.entity.value == "v1"
        gateway.yield_response(DocResponse(content={"content": "v2"}))
        assert use_case.entity.value == "v2"
