"""GraphQL types for epochs and the validator set."""

from __future__ import annotations

from datetime import datetime

import strawberry
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    Node,
    connection_args,
)
from ledger_gateway.features.graphql.types.checkpoints import (
    CheckpointConnection,
    query_checkpoint_connection,
)
from ledger_gateway.features.graphql.types.owners import AddressType
from ledger_gateway.features.graphql.types.protocol import ProtocolConfigsType
from ledger_gateway.features.graphql.types.scalars import Base64, BigInt, ms_to_datetime
from ledger_gateway.infra.ledger.models import Checkpoint, EpochInfo, Validator


@strawberry.type(name="ValidatorCredentials", description="Keys and network addresses of a validator")
class ValidatorCredentialsType:
    protocol_pub_key: Base64 | None = None
    network_pub_key: Base64 | None = None
    worker_pub_key: Base64 | None = None
    proof_of_possession: Base64 | None = None
    net_address: str | None = None
    p2p_address: str | None = None
    primary_address: str | None = None
    worker_address: str | None = None


@strawberry.type(name="Validator", description="A validator as of one epoch")
class ValidatorType:
    model: strawberry.Private[Validator]

    @strawberry.field
    def address(self) -> AddressType:
        return AddressType(address=self.model.sui_address)

    @strawberry.field
    def credentials(self) -> ValidatorCredentialsType:
        v = self.model
        return ValidatorCredentialsType(
            protocol_pub_key=v.protocol_pubkey_bytes,
            network_pub_key=v.network_pubkey_bytes,
            worker_pub_key=v.worker_pubkey_bytes,
            proof_of_possession=v.proof_of_possession_bytes,
            net_address=v.net_address,
            p2p_address=v.p2p_address,
            primary_address=v.primary_address,
            worker_address=v.worker_address,
        )

    @strawberry.field
    def next_epoch_credentials(self) -> ValidatorCredentialsType:
        v = self.model
        return ValidatorCredentialsType(
            protocol_pub_key=v.next_epoch_protocol_pubkey_bytes,
            network_pub_key=v.next_epoch_network_pubkey_bytes,
            worker_pub_key=v.next_epoch_worker_pubkey_bytes,
            proof_of_possession=v.next_epoch_proof_of_possession,
            net_address=v.next_epoch_net_address,
            p2p_address=v.next_epoch_p2p_address,
            primary_address=v.next_epoch_primary_address,
            worker_address=v.next_epoch_worker_address,
        )

    @strawberry.field
    def name(self) -> str | None:
        return self.model.name

    @strawberry.field
    def description(self) -> str | None:
        return self.model.description

    @strawberry.field
    def image_url(self) -> str | None:
        return self.model.image_url

    @strawberry.field
    def project_url(self) -> str | None:
        return self.model.project_url

    @strawberry.field
    def staking_pool_id(self) -> str | None:
        return self.model.staking_pool_id

    @strawberry.field
    def staking_pool_activation_epoch(self) -> BigInt | None:
        return self.model.staking_pool_activation_epoch

    @strawberry.field
    def staking_pool_sui_balance(self) -> BigInt | None:
        return self.model.staking_pool_sui_balance

    @strawberry.field
    def rewards_pool(self) -> BigInt | None:
        return self.model.rewards_pool

    @strawberry.field
    def pool_token_balance(self) -> BigInt | None:
        return self.model.pool_token_balance

    @strawberry.field
    def pending_stake(self) -> BigInt | None:
        return self.model.pending_stake

    @strawberry.field
    def pending_total_sui_withdraw(self) -> BigInt | None:
        return self.model.pending_total_sui_withdraw

    @strawberry.field
    def pending_pool_token_withdraw(self) -> BigInt | None:
        return self.model.pending_pool_token_withdraw

    @strawberry.field
    def exchange_rates_size(self) -> BigInt | None:
        return self.model.exchange_rates_size

    @strawberry.field
    def voting_power(self) -> int | None:
        return int(self.model.voting_power) if self.model.voting_power is not None else None

    @strawberry.field
    def gas_price(self) -> BigInt | None:
        return self.model.gas_price

    @strawberry.field(description="Commission in basis points")
    def commission_rate(self) -> int | None:
        return int(self.model.commission_rate) if self.model.commission_rate is not None else None

    @strawberry.field
    def next_epoch_stake(self) -> BigInt | None:
        return self.model.next_epoch_stake

    @strawberry.field
    def next_epoch_gas_price(self) -> BigInt | None:
        return self.model.next_epoch_gas_price

    @strawberry.field
    def next_epoch_commission_rate(self) -> int | None:
        rate = self.model.next_epoch_commission_rate
        return int(rate) if rate is not None else None


@strawberry.type(name="ValidatorSet", description="Validators active in an epoch")
class ValidatorSetType:
    validators: strawberry.Private[list[Validator]]

    @strawberry.field(description="Stake held by the active validators' staking pools")
    def total_stake(self) -> BigInt:
        return str(sum(int(v.staking_pool_sui_balance or 0) for v in self.validators))

    @strawberry.field
    def active_validators(self) -> list[ValidatorType]:
        return [ValidatorType(model=validator) for validator in self.validators]

    @strawberry.field(description="Positions of validators with no stake for the next epoch")
    def pending_removals(self) -> list[int]:
        return [
            index
            for index, validator in enumerate(self.validators)
            if not int(validator.next_epoch_stake or 0) > 0
        ]


@strawberry.type(name="Epoch", description="A period with a fixed validator set")
class EpochType(Node):
    node_type = "Epoch"

    model: strawberry.Private[EpochInfo]

    def node_key(self) -> str:
        return self.model.epoch

    @classmethod
    def from_model(cls, model: EpochInfo) -> EpochType:
        return cls(model=model)

    @strawberry.field
    def epoch_id(self) -> int:
        return self.model.epoch_number

    @strawberry.field
    def reference_gas_price(self) -> BigInt | None:
        end = self.model.end_of_epoch_info
        return self.model.reference_gas_price or (end.reference_gas_price if end else None)

    @strawberry.field
    def start_timestamp(self) -> datetime | None:
        return ms_to_datetime(self.model.epoch_start_timestamp)

    @strawberry.field(description="Absent while the epoch is in progress")
    def end_timestamp(self) -> datetime | None:
        end = self.model.end_of_epoch_info
        return ms_to_datetime(end.epoch_end_timestamp) if end else None

    @strawberry.field
    def total_transactions(self) -> BigInt | None:
        return self.model.epoch_total_transactions

    @strawberry.field
    def total_gas_fees(self) -> BigInt | None:
        end = self.model.end_of_epoch_info
        return end.total_gas_fees if end else None

    @strawberry.field
    def total_stake_rewards(self) -> BigInt | None:
        end = self.model.end_of_epoch_info
        return end.total_stake_rewards_distributed if end else None

    @strawberry.field
    def storage_fund_balance(self) -> BigInt | None:
        end = self.model.end_of_epoch_info
        return end.storage_fund_balance if end else None

    @strawberry.field
    def validator_set(self) -> ValidatorSetType:
        return ValidatorSetType(validators=self.model.validators)

    @strawberry.field(description="Protocol configuration in force during this epoch")
    async def protocol_configs(self, info: Info[GraphQLContext, None]) -> ProtocolConfigsType:
        end = self.model.end_of_epoch_info
        version = end.protocol_version if end else None
        return ProtocolConfigsType.from_model(await info.context.client.get_protocol_config(version))

    @strawberry.field(description="Checkpoints of this epoch, oldest first")
    async def checkpoint_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> CheckpointConnection:
        epoch = self.model.epoch_number
        first_id = int(self.model.first_checkpoint_id or 0)
        end = self.model.end_of_epoch_info
        last_id = int(end.last_checkpoint_id) if end and end.last_checkpoint_id else None

        def start(descending: bool) -> str | None:
            if descending:
                return str(last_id + 1) if last_id is not None else None
            return str(first_id - 1) if first_id > 0 else None

        def exhausted(items: list[Checkpoint], descending: bool) -> bool:
            if not items:
                return False
            boundary = int(items[-1].sequence_number)
            if descending:
                return boundary <= first_id
            return last_id is not None and boundary >= last_id

        return await query_checkpoint_connection(
            info.context,
            connection_args(first, after, last, before),
            newest_first=False,
            start=start,
            keep=lambda checkpoint: int(checkpoint.epoch) == epoch,
            exhausted=exhausted,
        )


__all__ = ["EpochType", "ValidatorSetType", "ValidatorType"]
